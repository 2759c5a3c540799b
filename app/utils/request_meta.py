"""
Request metadata helpers.

Sessions, ratings and admin activities all record who sent the request:
client IP and User-Agent header.
"""

from typing import Optional
from fastapi import Request


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, honouring the first X-Forwarded-For hop (Netlify/Render proxies)."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def get_request_meta(request: Request) -> dict:
    """
    Build the request_meta dict the services expect.

    Returns:
        {"ip_address": str | None, "user_agent": str | None}
    """
    return {
        "ip_address": get_client_ip(request),
        "user_agent": request.headers.get("user-agent"),
    }
