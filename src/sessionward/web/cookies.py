from fastapi import Request, Response

from sessionward.config import Config
from sessionward.core.modules.session.models import IssuedSession
from sessionward.core.modules.token.codec import cookie_name_for_origin
from sessionward.utils import now


def request_origin(request: Request) -> str:
    """Origin header, or the request's own scheme and host when the browser omitted it."""
    return request.headers.get("origin") or f"{request.url.scheme}://{request.url.netloc}"


def session_cookie_name(config: Config, request: Request) -> str:
    if config.cookie_per_origin:
        return cookie_name_for_origin(config.cookie_name, request_origin(request))
    return config.cookie_name


def set_session_cookie(response: Response, request: Request, config: Config, issued: IssuedSession) -> None:
    """Set the session cookie; Max-Age and Expires both track the record's expiry."""
    expires_at = issued.record.expires_at
    response.set_cookie(
        key=session_cookie_name(config, request),
        value=issued.token,
        max_age=max(0, int((expires_at - now()).total_seconds())),
        expires=expires_at,
        path="/",
        secure=config.cookie_secure,
        httponly=True,
        samesite=config.cookie_samesite,
    )


def clear_session_cookie(response: Response, request: Request, config: Config) -> None:
    response.delete_cookie(
        key=session_cookie_name(config, request),
        path="/",
        secure=config.cookie_secure,
        httponly=True,
        samesite=config.cookie_samesite,
    )
