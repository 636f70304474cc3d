"""
Input validation utilities

Each ``require_*`` helper returns the cleaned value or raises ValidationError,
so services can validate a whole payload before touching the session.
"""
import re
from decimal import Decimal, InvalidOperation

from trustnest.errors import ValidationError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email):
    """Validate email format"""
    if not email or not isinstance(email, str):
        return False
    return re.match(EMAIL_PATTERN, email) is not None


def validate_phone(phone):
    """Validate phone number format"""
    if not phone or not isinstance(phone, str):
        return False

    # Remove all non-digit characters
    digits_only = re.sub(r'\D', '', phone)
    return 10 <= len(digits_only) <= 15


def validate_otp(otp):
    return isinstance(otp, str) and re.fullmatch(r'\d{6}', otp) is not None


def require_choice(field, value, choices):
    if value not in choices:
        raise ValidationError(
            f"Invalid {field}. Allowed: {', '.join(sorted(choices))}",
            details={'field': field}
        )
    return value


def require_int_range(field, value, minimum, maximum):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", details={'field': field})
    if not minimum <= value <= maximum:
        raise ValidationError(
            f"{field} must be between {minimum} and {maximum}",
            details={'field': field}
        )
    return value


def require_bool(field, value):
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be true or false", details={'field': field})
    return value


def require_number(field, value, minimum=None, exclusive_minimum=False):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", details={'field': field})
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number", details={'field': field})
    if not number.is_finite():
        raise ValidationError(f"{field} must be a number", details={'field': field})
    if minimum is not None:
        if exclusive_minimum and number <= minimum:
            raise ValidationError(f"{field} must be greater than {minimum}", details={'field': field})
        if not exclusive_minimum and number < minimum:
            raise ValidationError(f"{field} must be at least {minimum}", details={'field': field})
    return number


def require_text(field, value, min_length=1, max_length=None):
    if not isinstance(value, str) or len(value.strip()) < min_length:
        raise ValidationError(
            f"{field} must be at least {min_length} characters",
            details={'field': field}
        )
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{field} must be at most {max_length} characters",
            details={'field': field}
        )
    return value


def require_string_list(field, value):
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"{field} must be a list of strings", details={'field': field})
    return [item.strip() for item in value if item.strip()]


def require_pagination(limit, offset, max_limit=100):
    limit = require_int_range('limit', limit, 1, max_limit)
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValidationError('offset must be a non-negative integer', details={'field': 'offset'})
    return limit, offset
