"""Property-level change contracts produced by the value comparator."""

from enum import Enum
from typing import List
from pydantic import BaseModel, Field, field_serializer
from ..diff.paths import Path
from ..diff.values import Value, NULL


class PropertyAction(str, Enum):
    """What happened to a single property."""
    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"


class UnknownKind(str, Enum):
    """Which side of a property change is only known after apply."""
    NONE = "none"
    BEFORE = "before"
    AFTER = "after"
    BOTH = "both"


class PropertyChange(BaseModel):
    """A single property that differs between the before and after states."""
    path: Path = Field(..., description="Structured location of the property")
    name: str = Field(default="", description="Property name (last key of the path)")
    action: PropertyAction = Field(..., description="add, remove or update")
    before: Value = Field(default=NULL, description="Before value (masked when sensitive)")
    after: Value = Field(default=NULL, description="After value (masked when sensitive or unknown)")
    sensitive: bool = Field(default=False, description="Value hidden because it is sensitive")
    unknown: bool = Field(default=False, description="Value only known after apply")
    unknown_kind: UnknownKind = Field(default=UnknownKind.NONE)
    size_bytes: int = Field(default=0, ge=0, description="Display size of before+after, capped per value")
    triggers_replacement: bool = Field(default=False, description="Path lies under a replace path")

    class Config:
        arbitrary_types_allowed = True
        frozen = True

    @field_serializer("path")
    def _dump_path(self, path: Path):
        return path.to_list()

    @field_serializer("before", "after")
    def _dump_value(self, value: Value):
        return value.to_json()


class PropertyChangeAnalysis(BaseModel):
    """All property changes captured for one resource."""
    changes: List[PropertyChange] = Field(default_factory=list, description="Captured changes, comparator order")
    count: int = Field(default=0, ge=0, description="All candidate changes, including ones not captured")
    sensitive_paths: List[str] = Field(default_factory=list, description="Every sensitive path seen, captured or not")
    total_size_bytes: int = Field(default=0, ge=0, description="Sum of captured change sizes")
    truncated: bool = Field(default=False, description="True when a limit stopped capture")

    class Config:
        frozen = True
