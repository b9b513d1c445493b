"""
Helper utilities
"""
import uuid
from datetime import datetime, date, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

import bcrypt

CENT = Decimal('0.01')


def generate_unique_id():
    """
    Generate a unique UUID

    Returns:
        str: UUID string
    """
    return str(uuid.uuid4())


def utcnow():
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def to_decimal(value):
    """
    Convert a number (or numeric string) to a Decimal rounded to cents

    Floats go through str() so 0.1 stays 0.10 instead of
    0.1000000000000000055...

    Returns:
        Decimal: Value quantized to 0.01, half-up

    Raises:
        ValueError: if value is not numeric or too large for the context
    """
    if isinstance(value, bool):
        raise ValueError(f'Not a number: {value!r}')
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValueError(f'Not a number: {value!r}')
    if not amount.is_finite():
        raise ValueError(f'Not a number: {value!r}')
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context can hold
        raise ValueError(f'Number too large: {value!r}')


def average(total, count, default):
    """
    Exact average of `count` values summing to `total`, rounded to cents

    Args:
        total: Sum of the values
        count (int): Number of values
        default (Decimal): Returned when count is zero

    Returns:
        Decimal: Average quantized to 0.01, half-up
    """
    if not count:
        return to_decimal(default)
    return (Decimal(total) / Decimal(count)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount, currency='USD'):
    """
    Format amount as currency

    Args:
        amount: Numeric amount
        currency (str): Currency code

    Returns:
        str: Formatted currency string
    """
    if isinstance(amount, (Decimal, float, int)):
        amount = float(amount)

        if currency == 'USD':
            return f'${amount:,.2f}'
        else:
            return f'{amount:,.2f} {currency}'

    return str(amount)


def parse_datetime(value):
    """
    Parse an ISO-8601 date or datetime ('Z' suffix allowed)

    Args:
        value: str, date or datetime

    Returns:
        datetime: Timezone-aware datetime (naive input is taken as UTC)

    Raises:
        ValueError: if the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    else:
        raise ValueError(f'Invalid datetime: {value!r}')

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def hash_password(password):
    """Hash a password using bcrypt"""
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def check_password(password, password_hash):
    """Check a password against its bcrypt hash"""
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
