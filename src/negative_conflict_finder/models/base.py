"""Base model with common configuration."""

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseNCFModel(PydanticBaseModel):
    """Base model for all conflict finder models."""

    model_config = ConfigDict(
        # Validate on assignment
        validate_assignment=True,
        # Allow population by field name
        populate_by_name=True,
    )


class SourceRecord(PydanticBaseModel):
    """Base for adapters that wrap loosely-shaped rows from a data source.

    Every field on a subclass is optional; unknown keys are ignored so a
    record with extra or missing nested fields still validates.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)
