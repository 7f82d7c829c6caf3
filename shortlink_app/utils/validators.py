import ipaddress
import re
import string
from urllib.parse import urlparse

from shortlink_app.errors import ValidationError


MAX_URL_LENGTH = 2048

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72  # bcrypt only looks at the first 72 bytes

ALIAS_MIN_LENGTH = 3
ALIAS_MAX_LENGTH = 30

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
ALIAS_CHARS = set(string.ascii_letters + string.digits + "_-")

# Paths the service itself answers on; an alias here would never redirect
RESERVED_ALIASES = {
    "api", "health", "docs", "redoc", "openapi.json", "static",
    "admin", "login", "logout", "register",
}


def validate_destination_url(url: str) -> str:
    """
    Validate a destination URL before it is stored.

    Args:
        url: The URL to validate

    Returns:
        The URL unchanged

    Raises:
        ValidationError: If the URL is empty, too long, not http(s),
            has no host, or points at a loopback/private address
    """
    if not url:
        raise ValidationError("URL cannot be empty")

    if len(url) > MAX_URL_LENGTH:
        raise ValidationError(f"URL is too long (max {MAX_URL_LENGTH} characters)")

    if not (url.startswith("http://") or url.startswith("https://")):
        raise ValidationError("URL must start with http:// or https://")

    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as e:
        raise ValidationError(f"Invalid URL format: {e}") from e

    if not host:
        raise ValidationError("URL must have a host")

    _check_internal_host(host)
    return url


def _check_internal_host(host: str) -> None:
    """Reject hosts that would turn a redirect into a request to internal services"""
    lowered = host.lower()
    if lowered == "localhost" or lowered.endswith(".localhost"):
        raise ValidationError("localhost URLs are not allowed")

    try:
        ip = ipaddress.ip_address(lowered)
    except ValueError:
        # A hostname, not a literal address; names are not resolved here
        return

    if ip.is_loopback:
        raise ValidationError("loopback IP addresses are not allowed")
    if ip.is_private:
        raise ValidationError("private IP addresses are not allowed")
    if ip.is_link_local:
        raise ValidationError("link-local IP addresses are not allowed")
    if ip.is_multicast:
        raise ValidationError("multicast IP addresses are not allowed")
    if ip.is_unspecified:
        raise ValidationError("unspecified IP addresses are not allowed")


def validate_custom_alias(alias: str) -> str:
    """
    Validate a user-chosen short code.

    Aliases are case-sensitive and must be safe to use as a single URL path
    segment.
    """
    if not alias:
        raise ValidationError("Alias cannot be empty")

    if len(alias) < ALIAS_MIN_LENGTH or len(alias) > ALIAS_MAX_LENGTH:
        raise ValidationError(
            f"Alias must be {ALIAS_MIN_LENGTH}-{ALIAS_MAX_LENGTH} characters"
        )

    if not all(c in ALIAS_CHARS for c in alias):
        raise ValidationError("Alias can only contain letters, digits, '-' and '_'")

    if alias.lower() in RESERVED_ALIASES:
        raise ValidationError(f"'{alias}' is a reserved word and cannot be used")

    return alias


def validate_credentials(username: str, password: str) -> str:
    """
    Validate registration input.

    Returns:
        The username with surrounding whitespace removed
    """
    username = (username or "").strip()

    if len(username) < USERNAME_MIN_LENGTH or len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )

    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Username can only contain letters, digits, '_', '-' and '.'")

    if password is None or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")

    return username
