from enum import StrEnum


class TokenPurpose(StrEnum):
    """Purposes bound into authorization token signatures."""

    EMAIL_VERIFY = "email-verify"
    PASSWORD_RESET = "password-reset"  # noqa: S105
