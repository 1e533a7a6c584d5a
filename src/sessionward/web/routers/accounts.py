from datetime import datetime

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel, Field

from sessionward.core.modules.account.models import AccountView
from sessionward.web.cookies import set_session_cookie
from sessionward.web.deps import AppDep, SessionDep
from sessionward.web.openapi import ErrorResponse

router = APIRouter(tags=["accounts"])


class CreateAccountRequest(BaseModel):
    """Request to create a new account."""

    email: str = Field(..., min_length=1, description="Email for the new account")
    password: str = Field(..., min_length=1, description="Password for the new account")


class ChangePasswordRequest(BaseModel):
    """Request to change the account password."""

    old_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, description="New password")


class ChangePasswordResponse(BaseModel):
    token: str | None = Field(None, description="Replacement session token (header transmission mode only)")
    expires_at: datetime = Field(..., description="Replacement session expiry")


class PasswordResetRequest(BaseModel):
    email: str = Field(..., min_length=1, description="Account email")


class PasswordResetConfirmRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Password reset token")
    new_password: str = Field(..., min_length=1, description="New password")


class EmailVerificationConfirmRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Email verification token")


@router.post(
    "/accounts",
    summary="Create account",
    description="Create a new account with email and password.",
    operation_id="createAccount",
    status_code=201,
    responses={
        201: {"description": "Account created"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
    },
)
async def create_account(create_data: CreateAccountRequest, app: AppDep) -> AccountView:
    return await app.create_account(create_data.email, create_data.password)


@router.get(
    "/accounts/me",
    summary="Current account",
    description="Get the account of the authenticated session.",
    operation_id="getCurrentAccount",
    responses={
        200: {"description": "Current account"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_current_account(app: AppDep, session: SessionDep) -> AccountView:
    return await app.get_account(session)


@router.post(
    "/accounts/change-password",
    summary="Change password",
    description="Change the password, end every session, and start a new one for this client.",
    operation_id="changePassword",
    responses={
        200: {"description": "Password changed"},
        400: {"model": ErrorResponse, "description": "Invalid new password"},
        401: {"model": ErrorResponse, "description": "Not authenticated or invalid current password"},
    },
)
async def change_password(
    change_data: ChangePasswordRequest, app: AppDep, session: SessionDep, request: Request, response: Response
) -> ChangePasswordResponse:
    issued = await app.change_password(session, change_data.old_password, change_data.new_password)
    if app.config.transmission_mode == "cookie":
        set_session_cookie(response, request, app.config, issued)
        return ChangePasswordResponse(expires_at=issued.record.expires_at)
    return ChangePasswordResponse(token=issued.token, expires_at=issued.record.expires_at)


@router.post(
    "/accounts/password-reset",
    summary="Request password reset",
    description="Send a one-time reset token. The response is identical whether or not the account exists.",
    operation_id="requestPasswordReset",
    status_code=202,
    responses={202: {"description": "Request accepted"}},
)
async def request_password_reset(reset_data: PasswordResetRequest, app: AppDep) -> None:
    await app.request_password_reset(reset_data.email)


@router.post(
    "/accounts/password-reset/confirm",
    summary="Confirm password reset",
    description="Redeem a reset token and set a new password. Ends every session of the account.",
    operation_id="confirmPasswordReset",
    status_code=204,
    responses={
        204: {"description": "Password reset"},
        400: {"model": ErrorResponse, "description": "Invalid new password"},
        401: {"model": ErrorResponse, "description": "Invalid or used token"},
    },
)
async def confirm_password_reset(confirm_data: PasswordResetConfirmRequest, app: AppDep) -> None:
    await app.confirm_password_reset(confirm_data.token, confirm_data.new_password)


@router.post(
    "/accounts/email-verification",
    summary="Request email verification",
    description="Send a one-time email verification token to the current account.",
    operation_id="requestEmailVerification",
    status_code=202,
    responses={
        202: {"description": "Request accepted"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def request_email_verification(app: AppDep, session: SessionDep) -> None:
    await app.request_email_verification(session)


@router.post(
    "/accounts/email-verification/confirm",
    summary="Confirm email verification",
    description="Redeem an email verification token.",
    operation_id="confirmEmailVerification",
    status_code=204,
    responses={
        204: {"description": "Email verified"},
        401: {"model": ErrorResponse, "description": "Invalid or used token"},
    },
)
async def confirm_email_verification(confirm_data: EmailVerificationConfirmRequest, app: AppDep) -> None:
    await app.confirm_email_verification(confirm_data.token)
