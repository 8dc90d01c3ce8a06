from typing import Any

# ----------------------------
# Nested document access
# ----------------------------


def nested_string(obj: Any, *keys: str) -> str:
    """
    Walk mapping levels one key at a time and return the string found
    at the last key.

    Returns "" whenever a level is missing, is not a mapping, or the final
    value is not a string. Never raises.
    """
    if not keys:
        return ""

    parent = nested_map(obj, *keys[:-1])
    if parent is None:
        return ""

    value = parent.get(keys[-1])
    return value if isinstance(value, str) else ""


def nested_map(obj: Any, *keys: str) -> dict[str, Any] | None:
    """
    Walk mapping levels and return the mapping found at the last key,
    or None if any step fails.
    """
    current = obj
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)

    return current if isinstance(current, dict) else None


def nested_list(obj: Any, *keys: str) -> list[Any]:
    if not keys:
        return obj if isinstance(obj, list) else []

    parent = nested_map(obj, *keys[:-1])
    if parent is None:
        return []

    value = parent.get(keys[-1])
    return value if isinstance(value, list) else []


def nested_int(obj: Any, *keys: str) -> int:
    if not keys:
        return 0

    parent = nested_map(obj, *keys[:-1])
    if parent is None:
        return 0

    value = parent.get(keys[-1])
    # bool is an int subclass, a flag is not a counter
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def nested_bool(obj: Any, *keys: str) -> bool:
    if not keys:
        return False

    parent = nested_map(obj, *keys[:-1])
    if parent is None:
        return False

    return parent.get(keys[-1]) is True


def get_name(obj: Any) -> str:
    return nested_string(obj, "metadata", "name")


def get_namespace(obj: Any) -> str:
    return nested_string(obj, "metadata", "namespace")


def get_creation_timestamp(obj: Any) -> str:
    return nested_string(obj, "metadata", "creationTimestamp")
