"""Input validation for Google Ads identifiers used in queries."""

import re

CUSTOMER_ID_PATTERN = re.compile(r"^\d{7,10}$")  # 7-10 digits for Google Ads customer IDs


def validate_customer_id(customer_id: str | int) -> str:
    """Validate customer ID format.

    Args:
        customer_id: Customer ID with or without hyphens

    Returns:
        Customer ID with hyphens and whitespace removed

    Raises:
        ValueError: If customer ID is invalid
    """
    if not isinstance(customer_id, str):
        customer_id = str(customer_id)

    # Remove whitespace and hyphens
    cleaned_id = customer_id.replace("-", "").replace(" ", "").strip()

    if CUSTOMER_ID_PATTERN.match(cleaned_id):
        return cleaned_id
    raise ValueError(
        f"Invalid customer ID format: '{customer_id}'. "
        "Must be 7-10 digits (with or without hyphens)"
    )
