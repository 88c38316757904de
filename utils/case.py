"""
camelCase <-> snake_case helpers.

Information documents are stored with snake_case keys (as dumped from the
pydantic schemas); clients send and receive camelCase.
"""
from typing import Any, Iterable

from pydantic.alias_generators import to_camel, to_snake


def to_camel_key(s: str) -> str:
    return to_camel(s)


def to_snake_key(s: str) -> str:
    return to_snake(s)


def camelize(obj: Any, deep: bool = True) -> Any:
    """Convert dict keys to camelCase. With deep=False nested values are left untouched."""
    if isinstance(obj, dict):
        return {to_camel_key(k): (camelize(v) if deep else v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [camelize(x, deep) for x in obj]
    return obj


def snake_names(names: Iterable[str]) -> tuple[str, ...]:
    """Map client field names (camelCase) to stored keys."""
    return tuple(to_snake_key(n) for n in names)
