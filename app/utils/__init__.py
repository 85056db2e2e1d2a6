"""Utility modules for common operations."""

from app.utils.parsing import parse_date, parse_datetime, to_decimal, to_str

__all__ = [
    "to_decimal",
    "to_str",
    "parse_date",
    "parse_datetime",
]
