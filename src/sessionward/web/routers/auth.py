from datetime import datetime

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel, Field

from sessionward.core.modules.session.models import SessionView
from sessionward.web.cookies import clear_session_cookie, set_session_cookie
from sessionward.web.deps import AppDep, PresentedTokenDep, SessionDep
from sessionward.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field(..., min_length=1, description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class LoginResponse(BaseModel):
    """Authentication response."""

    token: str | None = Field(None, description="Session token (header transmission mode only)")
    expires_at: datetime = Field(..., description="Session expiry")


@router.post(
    "/auth/login",
    summary="Authenticate",
    description="Authenticate with email and password to start a session.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Origin not allowed"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, request: Request, response: Response) -> LoginResponse:
    """Authenticate user and create session."""
    if app.config.transmission_mode == "cookie":
        app.core.origin_guard.check(request.headers.get("origin"), request.method).unwrap()

    issued = await app.login(login_data.email, login_data.password)

    if app.config.transmission_mode == "cookie":
        set_session_cookie(response, request, app.config, issued)
        return LoginResponse(expires_at=issued.record.expires_at)
    return LoginResponse(token=issued.token, expires_at=issued.record.expires_at)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Invalidate the current session. Succeeds even if the session already ended.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Session ended"},
        403: {"model": ErrorResponse, "description": "Origin not allowed"},
    },
)
async def logout(app: AppDep, presented: PresentedTokenDep, request: Request, response: Response) -> None:
    if presented.value:
        await app.logout(presented.value)
    if presented.via_cookie:
        clear_session_cookie(response, request, app.config)


@router.post(
    "/auth/logout-all",
    summary="End all sessions",
    description="Invalidate every session of the current account.",
    operation_id="logoutAll",
    status_code=204,
    responses={
        204: {"description": "All sessions ended"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout_all(app: AppDep, session: SessionDep, request: Request, response: Response) -> None:
    await app.logout_all(session)
    if app.config.transmission_mode == "cookie":
        clear_session_cookie(response, request, app.config)


@router.get(
    "/auth/session",
    summary="Current session",
    description="Get the session behind the presented token.",
    operation_id="getSession",
    responses={
        200: {"description": "Current session"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_session(app: AppDep, session: SessionDep) -> SessionView:
    return app.get_session_view(session)
