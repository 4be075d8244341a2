"""
Client identity for per-client rate limiting.

Resolution order: first entry of X-Forwarded-For, X-Real-IP, the transport
peer address, then the literal ``"unknown"``. Every request without any
address shares the ``unknown`` bucket.
"""

from starlette.requests import Request

UNKNOWN_CLIENT = "unknown"


def get_client_id(request: Request) -> str:
    """Extract the rate limit key for a request."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT
