"""
Calendar date normalization used by datetime conditions
"""

from .date_normalizer import (
    DATE_FORMATS,
    DateFormat,
    ParsedDate,
    parse_date,
    is_same,
    is_before,
    is_before_or_at,
    is_after,
    is_after_or_at,
)

__all__ = [
    'DATE_FORMATS',
    'DateFormat',
    'ParsedDate',
    'parse_date',
    'is_same',
    'is_before',
    'is_before_or_at',
    'is_after',
    'is_after_or_at',
]
