"""
AmarGolpo Backend — Stored Document Helpers
=============================================

What:  Shared conversion for raw MongoDB documents before they are loaded
       into the typed Book / Quote records.
Why:   Documents may carry BSON values (ObjectId) anywhere in free-form
       fields; the JSON API exposes them as strings.
"""

from typing import Any

from bson import ObjectId


def stringify_object_ids(value: Any) -> Any:
    """Recursively replace ObjectId values with their hex string."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: stringify_object_ids(item) for key, item in value.items()}
    if isinstance(value, list):
        return [stringify_object_ids(item) for item in value]
    return value
