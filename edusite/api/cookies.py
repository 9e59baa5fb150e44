"""Session cookie attributes. The cookie holds only the signed opaque token."""

from typing import Any

from fastapi import Response

from edusite.core.config import get_settings
from edusite.core.security import sign_session_token


def session_cookie_kwargs(value: str) -> dict[str, Any]:
    settings = get_settings()
    return {
        "key": settings.SESSION_COOKIE_NAME,
        "value": value,
        "max_age": settings.session_ttl_seconds,
        "httponly": True,
        # Plain-HTTP dev servers would drop a Secure cookie.
        "secure": settings.is_production,
        "samesite": "lax",
        "path": "/",
    }


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(**session_cookie_kwargs(sign_session_token(token)))


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )
