"""Partial updates.

A ChangeSet holds only the fields a caller explicitly sent. Fields left out
of the payload are never touched, even when the update schema gives them a
default of None.
"""
from typing import Any, Iterator, Mapping, Optional

from pydantic import BaseModel


class ChangeSet:
    """Ordered (field name, new value) pairs."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: dict[str, Any] = dict(values or {})

    @classmethod
    def from_update(cls, payload: Optional[BaseModel]) -> "ChangeSet":
        """Build a change set from the fields explicitly set on an update payload."""
        if payload is None:
            return cls()
        return cls(payload.model_dump(exclude_unset=True))

    def changed_field_names(self) -> list[str]:
        return list(self._values)

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def is_empty(self) -> bool:
        return not self._values

    def patch(self, target: Any) -> list[str]:
        """Set every present field on target. Returns the names that were applied."""
        for name, value in self._values.items():
            setattr(target, name, value)
        return self.changed_field_names()

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self._values.items())

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"<ChangeSet {self.changed_field_names()}>"


def apply_changes(original: Any, changes: ChangeSet) -> tuple[Any, list[str]]:
    """Apply changes to original in place and return it with the changed field names."""
    return original, changes.patch(original)
