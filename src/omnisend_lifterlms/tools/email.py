"""Email related tools."""

from email.errors import HeaderParseError
from email.headerregistry import Address


def sanitize_email(email: str | None) -> str:
    """Return the email stripped of surrounding whitespace, or "" when it is not a valid address."""
    if not email:
        return ""
    email = email.strip()
    try:
        address = Address(addr_spec=email)
    except (ValueError, AttributeError, IndexError, HeaderParseError):
        return ""
    if not address.username or not address.domain:
        return ""
    if len(address.username) > 64 or len(address.domain) > 255:  # noqa: PLR2004
        # Simple length validation using the RFC 5321 limits
        return ""
    if address.addr_spec != email:
        # Quoted or otherwise rewritten local parts are refused
        return ""
    return email
