"""
Validation utilities

The `require_*` helpers raise ValidationError with a message that tells the
caller how to fix the input; the `validate_*` helpers return booleans.
"""
import math
import re
from decimal import Decimal

from app.errors import ValidationError
from app.utils.helpers import to_decimal, parse_datetime

# Largest values the Numeric(12, 2) and Numeric(10, 2) money columns hold
MAX_AMOUNT = Decimal('9999999999.99')
MAX_RATE = Decimal('99999999.99')


def validate_email(email):
    """
    Validate email format

    Args:
        email (str): Email address to validate

    Returns:
        bool: True if valid, False otherwise
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_url(url):
    """
    Validate an http(s) URL

    Args:
        url (str): URL to validate

    Returns:
        bool: True if valid, False otherwise
    """
    if not url or not isinstance(url, str):
        return False
    return bool(re.match(r'^https?://[^\s/$.?#].[^\s]*$', url, re.IGNORECASE))


def require_text(data, field, label=None):
    """Return the stripped, non-empty string at data[field]"""
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{label or field} is required')
    return value.strip()


def optional_text(data, field):
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    return value.strip() or None


def require_positive_amount(value, field='amount', maximum=MAX_AMOUNT):
    """Return value as a cents Decimal in (0, maximum]"""
    try:
        amount = to_decimal(value)
    except ValueError:
        raise ValidationError(f'{field} must be a number')
    if amount <= 0:
        raise ValidationError(f'{field} must be greater than 0')
    if amount > maximum:
        raise ValidationError(f'{field} must not exceed {maximum:,}')
    return amount


def require_datetime(value, field):
    try:
        return parse_datetime(value)
    except (ValueError, TypeError):
        raise ValidationError(f'{field} must be an ISO-8601 datetime')


def require_choice(value, choices, field):
    if value not in choices:
        raise ValidationError(f'{field} must be one of: {", ".join(choices)}')
    return value


def require_range(value, low, high, field):
    """Return value as float, rejecting anything outside [low, high]"""
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number')
    if not math.isfinite(number):
        raise ValidationError(f'{field} must be a finite number')
    if number < low or number > high:
        raise ValidationError(f'{field} must be between {low:g} and {high:g}')
    return number


def require_coordinates(latitude, longitude):
    """Validate a latitude/longitude pair"""
    return (
        require_range(latitude, -90, 90, 'latitude'),
        require_range(longitude, -180, 180, 'longitude'),
    )


def require_rating(value):
    """Ratings are whole stars from 1 to 5"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError('rating must be a whole number between 1 and 5')
    if not math.isfinite(value) or int(value) != value:
        raise ValidationError('rating must be a whole number between 1 and 5')
    if value < 1 or value > 5:
        raise ValidationError('rating must be between 1 and 5')
    return int(value)
