"""
placement_api/utils/validation_utils.py

Purpose: Input validation

- ObjectId format checks for user and file identifiers
- Pagination parameter parsing
"""

from typing import Any, Optional

from bson import ObjectId


def is_valid_object_id(value: Any) -> bool:
    """
    Checks whether a value is usable as a store identifier.

    Accepts ObjectId instances and 24-character hex strings.
    """
    if isinstance(value, ObjectId):
        return True
    if not isinstance(value, str):
        return False
    return ObjectId.is_valid(value)


def to_object_id(value: Any) -> ObjectId:
    """
    Converts a validated identifier into an ObjectId.

    Raises:
        ValueError: if the value is not a valid identifier
    """
    if isinstance(value, ObjectId):
        return value
    if not is_valid_object_id(value):
        raise ValueError(f"Invalid ObjectId: {value!r}")
    return ObjectId(value)


def parse_positive_int(value: Any) -> Optional[int]:
    """
    Parses a query parameter as a strictly positive integer.

    Leading integer digits are honoured ("3" and " 3 " parse, "3.5" does not).

    Args:
        value: Raw query parameter value

    Returns:
        The integer, or None if the value is missing, non-numeric or <= 0
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        # str.isdigit() also accepts superscripts and non-ASCII digits
        if not text.isascii() or not text.lstrip("+").isdigit():
            return None
        try:
            number = int(text)
        except ValueError:
            return None

    return number if number > 0 else None
