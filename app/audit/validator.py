# app/audit/validator.py
import ipaddress
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")

# characters a URL host may never contain (plus C0 controls, space and DEL)
FORBIDDEN_HOST_CHARS = set("#%/:<>?@[\\]^|")


def _valid_host(parts) -> bool:
    host = parts.hostname
    if not host:
        return False
    if parts.netloc.rpartition("@")[2].startswith("["):
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True
    return not any(ch in FORBIDDEN_HOST_CHARS or ord(ch) <= 0x20 or ord(ch) == 0x7F for ch in host)


def validate_url(value) -> bool:
    """True only for an absolute http(s) URL with a well-formed host. Never raises."""
    if not isinstance(value, str):
        return False
    u = value.strip()
    if not u:
        return False
    try:
        parts = urlsplit(u)
        # .port raises ValueError on a non-numeric or out-of-range port
        parts.port
    except ValueError:
        return False
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return False
    return _valid_host(parts)
