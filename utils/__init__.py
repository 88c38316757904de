"""Shared utilities for the backend."""
from utils.case import camelize, snake_names, to_camel_key, to_snake_key
from utils.formatting import (
    format_date,
    format_korean_phone_number,
    format_number,
    format_phone_number,
    is_valid_phone_number,
    relative_time,
    remove_commas,
)

__all__ = [
    "to_camel_key",
    "to_snake_key",
    "camelize",
    "snake_names",
    "format_date",
    "format_korean_phone_number",
    "format_number",
    "format_phone_number",
    "is_valid_phone_number",
    "relative_time",
    "remove_commas",
]
