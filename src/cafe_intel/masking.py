"""
Display masking for identifiers echoed back to callers.
"""


def mask_sensitive_value(value: str) -> str:
    """
    Partially redact an email, phone number, wallet address or handle.

    - email: first two local-part characters + "***@" + domain
    - phone ("+..." or all digits): first 3 + "***" + last 2
    - hex address ("0x..."): first 6 + "..." + last 4
    - anything else: first 3 + "***"

    Short inputs never raise; slices past the end yield what is there.

    Args:
        value: Raw identifier

    Returns:
        Masked identifier
    """
    if "@" in value:
        username, _, domain = value.partition("@")
        return f"{username[:2]}***@{domain}"

    if value.startswith("+") or (value.isdigit() and value.isascii()):
        return value[:3] + "***" + value[-2:]

    if value.startswith("0x"):
        return value[:6] + "..." + value[-4:]

    return value[:3] + "***"
