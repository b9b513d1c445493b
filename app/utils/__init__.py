"""Utilities package"""
from .helpers import (
    generate_unique_id,
    utcnow,
    to_decimal,
    average,
    format_currency,
    parse_datetime,
    hash_password,
    check_password,
)

__all__ = [
    'generate_unique_id',
    'utcnow',
    'to_decimal',
    'average',
    'format_currency',
    'parse_datetime',
    'hash_password',
    'check_password',
]
