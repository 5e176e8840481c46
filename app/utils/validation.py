from typing import Iterable, Optional

from email_validator import EmailNotValidError, validate_email

from app.core.exceptions import ValidationError


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_text(value: Optional[str], message: str) -> str:
    cleaned = clean_text(value)
    if cleaned is None:
        raise ValidationError(message)
    return cleaned


def any_blank(values: Iterable[Optional[str]]) -> bool:
    return any(clean_text(v) is None for v in values)


def normalize_email(email: str) -> str:
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email address: {e}")
    return result.normalized.lower()
