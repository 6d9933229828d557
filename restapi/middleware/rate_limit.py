from slowapi import Limiter
from starlette.requests import Request

from restapi.config import settings


def get_client_ip(request: Request) -> str:
    """Client address used as the rate limit key.

    X-Forwarded-For is only honoured when running behind a trusted reverse
    proxy (``trust_proxy_headers``); otherwise any client could pick its
    own key and dodge the login limit.
    """
    if settings.trust_proxy_headers:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


limiter = Limiter(key_func=get_client_ip)
