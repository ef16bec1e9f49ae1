import uuid
from typing import Any, Iterable, List


def normalize_id(value: Any) -> str:
    """Single equality rule for group and user identifiers.

    Valid UUIDs come back in canonical lowercase hyphenated form so that
    casing differences between clients never split a group.
    """
    if value is None:
        return ""
    value = str(value).strip()
    if is_uuid(value):
        return str(uuid.UUID(value))
    return value


def new_id() -> str:
    return str(uuid.uuid4())


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def unique_ids(values: Iterable[Any]) -> List[str]:
    """Normalize and de-duplicate, keeping first-seen order."""
    return list(dict.fromkeys(normalize_id(v) for v in values if normalize_id(v)))
