from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request


def get_user_identifier(request: Request) -> str:
    # Fallback to standard remote address or X-User-ID
    return request.headers.get("X-User-ID", get_remote_address(request))


# Per-user rate limiter
limiter = Limiter(key_func=get_user_identifier)
