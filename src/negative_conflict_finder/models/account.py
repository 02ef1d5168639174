"""Account models for per-account and manager-wide conflict runs."""

from pydantic import Field

from negative_conflict_finder.models.base import BaseNCFModel


class AccountContext(BaseNCFModel):
    """A Google Ads account selected for analysis."""

    customer_id: str = Field(..., description="Google Ads customer ID")
    descriptive_name: str | None = Field(None, description="Account descriptive name")
    labels: list[str] = Field(default_factory=list, description="Applied account label names")

    @property
    def display_name(self) -> str:
        """Name used in report rows, falling back to the customer ID."""
        return self.descriptive_name or f"Account ID: {self.customer_id}"


class RunSummary(BaseNCFModel):
    """Outcome of a conflict run over one or more accounts."""

    accounts_seen: int = Field(0, description="Accounts returned by the enumerator")
    accounts_analyzed: int = Field(0, description="Accounts whose index was built and analyzed")
    accounts_failed: int = Field(0, description="Accounts that produced an ERROR row")
    accounts_with_conflicts: int = Field(0)
    total_conflicts: int = Field(0)
    stopped_early: bool = Field(
        False, description="True when the wall-clock budget ran out before all accounts"
    )
    elapsed_seconds: float = Field(0.0)
