"""Conversion between input schemas, entities and view schemas.

Each (source type, destination type) pair is registered once. Without a
custom rule, same-named fields are copied.
"""
import logging
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger("bugwatch-core.mapping")

T = TypeVar("T")

MapRule = Callable[[Any], Any]


def _source_fields(value: Any, names: list[str]) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        data = value.model_dump()
        return {name: data[name] for name in names if name in data}
    return {name: getattr(value, name) for name in names if hasattr(value, name)}


def _copy_fields(value: Any, dest: type) -> Any:
    if issubclass(dest, BaseModel):
        return dest.model_validate(_source_fields(value, list(dest.model_fields)))

    table = getattr(dest, "__table__", None)
    if table is None:
        raise TypeError(f"No mapping rule from {type(value).__name__} to {dest.__name__}")

    # None is skipped so column defaults apply.
    data = _source_fields(value, list(table.columns.keys()))
    return dest(**{name: field_value for name, field_value in data.items() if field_value is not None})


class EntityMapper:
    """Registry of mapping rules."""

    def __init__(self):
        self._rules: dict[tuple[type, type], Optional[MapRule]] = {}

    def has_map(self, source: type, dest: type) -> bool:
        return (source, dest) in self._rules

    def register(self, source: type, dest: type, rule: Optional[MapRule] = None) -> None:
        """Register a rule for source -> dest. Registering a known pair again is a no-op."""
        if self.has_map(source, dest):
            return
        self._rules[(source, dest)] = rule
        logger.debug(f"Registered map {source.__name__} -> {dest.__name__}")

    def map(self, value: Any, dest: type[T]) -> T:
        if value is None:
            raise ValueError("Cannot map None")
        if isinstance(value, dest):
            return value

        rule = self._rules.get((type(value), dest))
        if rule is not None:
            return rule(value)
        return _copy_fields(value, dest)

    def map_many(self, values: list[Any], dest: type[T]) -> list[T]:
        return [self.map(value, dest) for value in values]


# Process wide registry shared by all controllers
default_mapper = EntityMapper()
