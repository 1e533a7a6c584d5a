from dataclasses import dataclass
from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sessionward.app import App
from sessionward.core.modules.identifier.models import SessionID
from sessionward.core.modules.session.models import SessionRecord
from sessionward.web.cookies import session_cookie_name

# Security schemes
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class PresentedToken:
    """Token as found on the request, before any verification."""

    value: str | None
    via_cookie: bool


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


def read_token(
    request: Request, app: App, credentials: HTTPAuthorizationCredentials | None
) -> PresentedToken:
    """Read the token from the configured transmission channel only."""
    if app.config.transmission_mode == "header":
        if credentials and credentials.scheme.lower() == "bearer":
            return PresentedToken(credentials.credentials, via_cookie=False)
        return PresentedToken(None, via_cookie=False)
    return PresentedToken(request.cookies.get(session_cookie_name(app.config, request)), via_cookie=True)


async def get_presented_token(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> PresentedToken:
    """Token without session lookup; cookie-borne tokens still pass the origin check."""
    presented = read_token(request, app, credentials)
    if presented.via_cookie:
        app.core.origin_guard.check(request.headers.get("origin"), request.method).unwrap()
    return presented


async def get_current_session(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> SessionRecord[SessionID]:
    """Resolve the authenticated session from the Bearer header or session cookie."""
    presented = read_token(request, app, credentials)
    return await app.authenticate_request(
        presented.value,
        origin=request.headers.get("origin"),
        method=request.method,
        via_cookie=presented.via_cookie,
    )


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
PresentedTokenDep = Annotated[PresentedToken, Depends(get_presented_token)]
SessionDep = Annotated[SessionRecord[SessionID], Depends(get_current_session)]
