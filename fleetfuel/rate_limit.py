"""Rate limiting global / Global rate limiter.

Cle par IP client, X-Forwarded-For en premier derriere un proxy.
Keyed by client IP, X-Forwarded-For first when behind a proxy.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(key_func=client_key)
