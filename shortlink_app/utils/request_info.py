import hashlib

from starlette.requests import Request


def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.

    Order: first hop of X-Forwarded-For, then X-Real-IP, then the socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"


def visitor_fingerprint(ip_address: str, user_agent: str) -> str:
    """SHA256 of ip + user agent. Distinguishes visitors without storing who they are."""
    raw = f"{ip_address or ''}|{user_agent or ''}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
