from sessionward.errors import ValidationError

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 1024


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - Between 8 and 1024 characters
    - Not made of whitespace only

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_LENGTH} characters long")

    if not password.strip():
        raise ValidationError("Password cannot consist of whitespace only")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str) -> str:
    """Return the normalized email or raise ValidationError."""
    normalized = normalize_email(email)
    local, sep, domain = normalized.partition("@")
    if not sep or not local or "." not in domain or any(char.isspace() for char in normalized):
        raise ValidationError("Invalid email address")
    return normalized
