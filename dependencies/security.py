from typing import Optional, Annotated
from fastapi import Header, HTTPException
from config.settings import settings
import hmac

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_console_token(authorization: AuthHeader = None):
    # no token configured -> local development, console is open
    if not settings.CONSOLE_API_TOKEN:
        return {"client": "anonymous"}

    if not authorization:
        raise _unauthorized("Missing Authorization header")

    # "Bearer <token>"
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise _unauthorized("Invalid Authorization header format")

    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme")

    if not hmac.compare_digest(token.strip(), settings.CONSOLE_API_TOKEN):
        raise _unauthorized("Invalid token")

    return {"client": "console"}
