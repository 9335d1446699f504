"""Immutable tagged-union representation of plan before/after data."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Tuple
from pydantic_core import core_schema


SENSITIVE_PLACEHOLDER = "(sensitive value)"
UNKNOWN_PLACEHOLDER = "(known after apply)"


class ValueKind(str, Enum):
    """Variants a plan value can take."""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    MAP = "map"
    OPAQUE = "opaque"


CONTAINER_KINDS = (ValueKind.LIST, ValueKind.MAP)


@dataclass(frozen=True)
class Value:
    """
    One node of a plan value tree.

    Scalars keep their Python value in ``scalar``. Lists keep their elements in
    ``items``; maps keep ``(key, value)`` pairs sorted by key in ``entries`` so
    that iteration order never depends on the source document. Anything that is
    not JSON-shaped becomes an OPAQUE value holding its ``str()`` form.
    """
    kind: ValueKind
    scalar: Any = None
    items: Tuple["Value", ...] = ()
    entries: Tuple[Tuple[str, "Value"], ...] = ()

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        # Accept instances as-is inside pydantic contracts.
        return core_schema.is_instance_schema(cls)

    @classmethod
    def string(cls, text: str) -> "Value":
        return cls(ValueKind.STRING, scalar=text)

    @classmethod
    def from_json(cls, data: Any) -> "Value":
        """Build a Value from decoded JSON (or any Python object)."""
        if isinstance(data, Value):
            return data
        if data is None:
            return NULL
        if isinstance(data, bool):
            return cls(ValueKind.BOOL, scalar=data)
        if isinstance(data, (int, float)):
            return cls(ValueKind.NUMBER, scalar=data)
        if isinstance(data, str):
            return cls(ValueKind.STRING, scalar=data)
        if isinstance(data, (list, tuple)):
            return cls(ValueKind.LIST, items=tuple(cls.from_json(item) for item in data))
        if isinstance(data, dict):
            entries = sorted(((str(k), cls.from_json(v)) for k, v in data.items()), key=lambda entry: entry[0])
            return cls(ValueKind.MAP, entries=tuple(entries))
        return cls(ValueKind.OPAQUE, scalar=str(data))

    @property
    def is_null(self) -> bool:
        return self.kind == ValueKind.NULL

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    def keys(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self.entries)

    def get(self, key: str) -> Optional["Value"]:
        """Return the child stored under ``key`` or None (maps only)."""
        for entry_key, entry_value in self.entries:
            if entry_key == key:
                return entry_value
        return None

    def at(self, index: int) -> Optional["Value"]:
        """Return the element at ``index`` or None (lists only)."""
        if 0 <= index < len(self.items):
            return self.items[index]
        return None

    def size(self) -> int:
        if self.kind == ValueKind.MAP:
            return len(self.entries)
        return len(self.items)

    def walk(self) -> Iterator["Value"]:
        """Yield this value and every nested value, depth first."""
        yield self
        for item in self.items:
            yield from item.walk()
        for _, entry_value in self.entries:
            yield from entry_value.walk()

    def to_json(self) -> Any:
        """Convert back to plain JSON-compatible Python data."""
        if self.kind == ValueKind.LIST:
            return [item.to_json() for item in self.items]
        if self.kind == ValueKind.MAP:
            return {key: entry_value.to_json() for key, entry_value in self.entries}
        return self.scalar

    def serialize(self) -> str:
        """Compact, key-sorted JSON text used for sizing and display."""
        return json.dumps(self.to_json(), sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    def is_true(self) -> bool:
        return self.kind == ValueKind.BOOL and self.scalar is True

    def any_true(self) -> bool:
        """True when this boolean mask (or anything nested in it) is true."""
        return any(node.is_true() for node in self.walk())


NULL = Value(ValueKind.NULL)
