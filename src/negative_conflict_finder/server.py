"""FastMCP server for negative keyword conflict checks."""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from negative_conflict_finder.core.config import get_settings, setup_logging
from negative_conflict_finder.core.exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    RateLimitError,
)
from negative_conflict_finder.data_providers.base import has_label
from negative_conflict_finder.data_providers.google_ads import GoogleAdsDataProvider
from negative_conflict_finder.exporters.tabular import (
    CSVTabularSink,
    MemoryTabularSink,
    TabularSink,
)
from negative_conflict_finder.models.account import RunSummary
from negative_conflict_finder.runner import ConflictReportRunner
from negative_conflict_finder.utils.validation import validate_customer_id

logger = logging.getLogger(__name__)

SERVER_NAME = "Negative Conflict Finder MCP Server"
SERVER_VERSION = "1.0.0"


# ============================================================================
# Error Codes
# ============================================================================


class ErrorCode(str, Enum):
    """Error codes for programmatic error handling."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_CUSTOMER_ID = "INVALID_CUSTOMER_ID"
    INVALID_INPUT = "INVALID_INPUT"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    CONFLICT_CHECK_ERROR = "CONFLICT_CHECK_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Initialize MCP server
mcp = FastMCP(SERVER_NAME)


# ============================================================================
# Helper Functions
# ============================================================================


def sanitize_error_message(msg: str) -> str:
    """Remove potential credentials from error messages.

    Args:
        msg: Original error message

    Returns:
        Sanitized error message with credentials redacted

    Examples:
        >>> sanitize_error_message("Token abc123xyzabc123xyzabc failed")
        'Token [REDACTED] failed'
    """
    # Remove anything that looks like a token (20+ alphanumeric/dash/underscore)
    msg = re.sub(r"[A-Za-z0-9_-]{20,}", "[REDACTED]", msg)

    # Remove anything that looks like an email address
    msg = re.sub(r"\b[\w.-]+@[\w.-]+\.\w+\b", "[EMAIL_REDACTED]", msg)

    # Remove anything that looks like an API key pattern
    msg = re.sub(
        r"(api[_-]?key|token|secret|password|credential)[\"']?\s*[:=]\s*[\"']?[^\s\"']+",
        r"\1=[REDACTED]",
        msg,
        flags=re.IGNORECASE,
    )

    return msg


# Global provider instance for reuse across requests
_provider_instance: GoogleAdsDataProvider | None = None


def reset_provider_for_testing():
    """Reset the singleton provider instance (for testing only)."""
    global _provider_instance
    _provider_instance = None


def _get_provider() -> GoogleAdsDataProvider:
    """Get or create the Google Ads data provider (singleton pattern).

    Raises:
        ConfigurationError: If Google Ads credentials are not configured
    """
    global _provider_instance

    if _provider_instance is None:
        _provider_instance = GoogleAdsDataProvider.from_settings(get_settings())

    return _provider_instance


def _make_sink(output_csv: str | None) -> TabularSink:
    """Choose the CSV file given by the caller or settings, else keep rows in memory."""
    path = output_csv or get_settings().conflicts.output_csv
    if path:
        return CSVTabularSink(Path(path))
    return MemoryTabularSink()


def _success_response(
    message: str, metadata: dict[str, Any], summary: RunSummary, sink: TabularSink
) -> dict[str, Any]:
    metadata = {**metadata, **summary.model_dump()}
    data: list[dict[str, str]] = []
    if isinstance(sink, CSVTabularSink):
        metadata["output_csv"] = str(sink.path)
    elif isinstance(sink, MemoryTabularSink):
        data = [dict(zip(sink.headers, row)) for row in sink.rows]

    return {"status": "success", "message": message, "metadata": metadata, "data": data}


def _error_response(error: Exception) -> dict[str, Any]:
    """Map an exception onto the error envelope."""
    if isinstance(error, ConfigurationError):
        logger.error(f"Configuration error: {sanitize_error_message(str(error))}")
        return {
            "status": "error",
            "error_code": ErrorCode.CONFIGURATION_ERROR,
            "message": f"Server is not configured: {str(error)}",
            "details": {"error_type": "configuration", "retry_allowed": False},
            "data": [],
        }
    if isinstance(error, ValueError):
        logger.error(f"Invalid input: {sanitize_error_message(str(error))}")
        return {
            "status": "error",
            "error_code": ErrorCode.INVALID_INPUT,
            "message": f"Invalid input: {str(error)}",
            "details": {"error_type": "validation", "retry_allowed": False},
            "data": [],
        }
    if isinstance(error, AuthenticationError):
        logger.error(
            f"Authentication failed: {sanitize_error_message(str(error))}", exc_info=error
        )
        return {
            "status": "error",
            "error_code": ErrorCode.INVALID_CREDENTIALS,
            "message": "Authentication failed. Please check your credentials.",
            "details": {"error_type": "authentication", "retry_allowed": False},
            "data": [],
        }
    if isinstance(error, RateLimitError):
        logger.warning(f"Rate limit exceeded: {sanitize_error_message(str(error))}")
        return {
            "status": "error",
            "error_code": ErrorCode.RATE_LIMIT_EXCEEDED,
            "message": "API rate limit exceeded. Please try again later.",
            "details": {
                "error_type": "rate_limit",
                "retry_allowed": True,
                "retry_after_seconds": 60,
            },
            "data": [],
        }
    if isinstance(error, APIError):
        logger.error(
            f"Google Ads API error: {sanitize_error_message(str(error))}", exc_info=error
        )
        return {
            "status": "error",
            "error_code": ErrorCode.CONFLICT_CHECK_ERROR,
            "message": f"Google Ads API error: {str(error)}",
            "details": {"error_type": "api_error", "retry_allowed": True},
            "data": [],
        }

    logger.error(f"Unexpected error: {sanitize_error_message(str(error))}", exc_info=error)
    return {
        "status": "error",
        "error_code": ErrorCode.INTERNAL_ERROR,
        "message": "An unexpected error occurred. Please contact support if this persists.",
        "details": {"error_type": "unexpected"},
        "data": [],
    }


# ============================================================================
# Models
# ============================================================================


class AccountConflictsRequest(BaseModel):
    """Request model for a single-account conflict check."""

    customer_id: str = Field(..., description="Google Ads customer ID (with or without dashes)")
    output_csv: str | None = Field(
        None, description="Optional CSV file path that receives the report rows"
    )


class LabelConflictsRequest(BaseModel):
    """Request model for a conflict check over labeled client accounts."""

    account_label: str | None = Field(
        None,
        description="Account label selecting client accounts; defaults to the configured label",
    )
    output_csv: str | None = Field(
        None, description="Optional CSV file path that receives the report rows"
    )


# ============================================================================
# Conflict checks
# ============================================================================


async def check_account_conflicts(request: AccountConflictsRequest) -> dict[str, Any]:
    """Run a single-account conflict check and build the response envelope."""
    try:
        customer_id = validate_customer_id(request.customer_id)
    except ValueError as e:
        logger.error(f"Invalid customer ID: {sanitize_error_message(str(e))}")
        return {
            "status": "error",
            "error_code": ErrorCode.INVALID_CUSTOMER_ID,
            "message": str(e),
            "details": {"error_type": "validation", "retry_allowed": False},
            "data": [],
        }

    try:
        provider = _get_provider()
        sink = _make_sink(request.output_csv)

        runner = ConflictReportRunner(provider, get_settings())
        summary = await runner.run_single_account(customer_id, sink)

        return _success_response(
            f"Found {summary.total_conflicts} negative keyword conflicts",
            {"customer_id": customer_id},
            summary,
            sink,
        )
    except Exception as e:
        return _error_response(e)


async def check_label_conflicts(request: LabelConflictsRequest) -> dict[str, Any]:
    """Run a conflict check over labeled client accounts and build the response envelope."""
    try:
        settings = get_settings()
        account_label = request.account_label or settings.conflicts.account_label
        label_predicate = has_label(account_label) if account_label else None

        provider = _get_provider()
        sink = _make_sink(request.output_csv)

        runner = ConflictReportRunner(provider, settings)
        summary = await runner.run_accounts(provider, label_predicate, sink)

        message = (
            f"Found {summary.total_conflicts} negative keyword conflicts across "
            f"{summary.accounts_analyzed} accounts"
        )
        if summary.stopped_early:
            message += " (stopped early: runtime budget reached)"

        return _success_response(
            message, {"account_label": account_label}, summary, sink
        )
    except Exception as e:
        return _error_response(e)


# ============================================================================
# Tools
# ============================================================================


@mcp.tool()
async def find_negative_keyword_conflicts(
    request: AccountConflictsRequest,
) -> dict[str, Any]:
    """
    Find negative keywords that block positive keywords in one Google Ads account.

    Negatives are checked at ad group, campaign, shared list and account level
    against every enabled positive keyword using Google Ads match type rules.
    Each result row names the negative, where it lives, and the positives it blocks.
    """
    return await check_account_conflicts(request)


@mcp.tool()
async def find_account_label_conflicts(request: LabelConflictsRequest) -> dict[str, Any]:
    """
    Find negative keyword conflicts across client accounts under the manager account.

    Accounts are selected by account label and processed one at a time within the
    configured runtime budget. Accounts without conflicts get a NO CONFLICT row and
    failing accounts an ERROR row.
    """
    return await check_label_conflicts(request)


# ============================================================================
# Resources
# ============================================================================


@mcp.resource("resource://health")
def health_check() -> dict[str, Any]:
    """
    Provides server health status and configuration information.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "version": SERVER_VERSION,
        "server": SERVER_NAME,
        "google_ads_configured": settings.google_ads is not None,
        "manager_account_configured": bool(
            settings.google_ads and settings.google_ads.login_customer_id
        ),
        "unknown_match_type_policy": settings.conflicts.unknown_match_type_policy.value,
        "tools_available": [
            "find_negative_keyword_conflicts",
            "find_account_label_conflicts",
        ],
    }


# ============================================================================
# Server Factory
# ============================================================================


def create_mcp_server() -> FastMCP:
    """
    Create and return the configured MCP server instance.

    Returns:
        FastMCP: The configured server instance ready to run.
    """
    return mcp


def main() -> None:
    """Configure logging and run the MCP server."""
    setup_logging(get_settings())
    mcp.run()


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == "__main__":
    main()
