from bson import ObjectId
from bson.errors import InvalidId


def to_object_id(value):
    """Return value as an ObjectId, or None if it cannot be one"""
    if isinstance(value, ObjectId):
        return value
    if not value:
        return None
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def same_id(left, right):
    """Canonical id equality: both sides compared as ObjectIds"""
    left_id = to_object_id(left)
    return left_id is not None and left_id == to_object_id(right)
