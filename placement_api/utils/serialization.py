"""
placement_api/utils/serialization.py

Purpose: Response shaping

- Converts BSON documents into JSON-safe structures
"""

from datetime import datetime, date
from typing import Any

from bson import ObjectId


def serialize_document(value: Any) -> Any:
    """
    Recursively renders ObjectIds as hex strings and datetimes as ISO-8601.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(item) for item in value]
    return value
