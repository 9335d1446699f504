"""Structured property paths.

A path is a sequence of segments, each either a map key or a list index. Keys
and indices never compare equal, so a map key literally named ``"1"`` and the
list position ``1`` are distinct locations.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Tuple, Union
from pydantic_core import core_schema


@dataclass(frozen=True)
class Key:
    """Map key segment."""
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class Index:
    """List index segment."""
    position: int

    def render(self) -> str:
        return f"[{self.position}]"


PathSegment = Union[Key, Index]

_TOKEN_RE = re.compile(r'\[(\d+)\]|\["((?:[^"\\]|\\.)*)"\]|([^.\[\]]+)')


@dataclass(frozen=True)
class Path:
    """Ordered sequence of path segments addressing one location in a value tree."""
    segments: Tuple[PathSegment, ...] = ()

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        # Accept instances as-is inside pydantic contracts.
        return core_schema.is_instance_schema(cls)

    @classmethod
    def of(cls, *parts: Union[str, int]) -> "Path":
        """Build a path from raw parts: strings become keys, ints become indices."""
        return cls(tuple(_segment(part) for part in parts))

    @classmethod
    def from_terraform(cls, raw: Any) -> "Path":
        """
        Convert a Terraform ``replace_paths`` entry into a Path.

        Terraform encodes steps as a JSON array of strings (attribute names or
        map keys) and numbers (list indices). A bare string is a single step.
        """
        if isinstance(raw, Path):
            return raw
        if isinstance(raw, (list, tuple)):
            return cls(tuple(_segment(part) for part in raw))
        return cls((_segment(raw),))

    @classmethod
    def parse(cls, text: str) -> "Path":
        """
        Parse the dotted notation used in configuration files.

        ``a.b[0].c`` gives keys ``a``, ``b``, index ``0`` and key ``c``. A key
        containing dots or brackets can be written as ``["key.name"]``.
        """
        segments: List[PathSegment] = []
        for match in _TOKEN_RE.finditer(text.strip()):
            index, quoted, bare = match.groups()
            if index is not None:
                segments.append(Index(int(index)))
            elif quoted is not None:
                segments.append(Key(quoted.replace('\\"', '"').replace("\\\\", "\\")))
            else:
                segments.append(Key(bare))
        return cls(tuple(segments))

    def child(self, segment: PathSegment) -> "Path":
        return Path(self.segments + (segment,))

    def startswith(self, prefix: "Path") -> bool:
        """True when ``prefix`` addresses this location or one of its ancestors."""
        size = len(prefix.segments)
        return size <= len(self.segments) and self.segments[:size] == prefix.segments

    def overlaps(self, other: "Path") -> bool:
        """True when one path lies at or below the other."""
        return self.startswith(other) or other.startswith(self)

    @property
    def name(self) -> str:
        """Last key in the path (the property name), ignoring trailing indices."""
        for segment in reversed(self.segments):
            if isinstance(segment, Key):
                return segment.name
        return ""

    def to_list(self) -> List[Union[str, int]]:
        return [seg.name if isinstance(seg, Key) else seg.position for seg in self.segments]

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self):
        return iter(self.segments)

    def __str__(self) -> str:
        rendered = ""
        for segment in self.segments:
            if isinstance(segment, Index):
                rendered += segment.render()
            elif _needs_quoting(segment.name):
                escaped = segment.name.replace("\\", "\\\\").replace('"', '\\"')
                rendered += f'["{escaped}"]'
            else:
                rendered += ("." if rendered else "") + segment.name
        return rendered


def _segment(part: Any) -> PathSegment:
    if isinstance(part, (Key, Index)):
        return part
    if isinstance(part, bool):
        return Key(str(part).lower())
    if isinstance(part, int):
        return Index(part)
    if isinstance(part, float) and part.is_integer():
        return Index(int(part))
    return Key(str(part))


def _needs_quoting(name: str) -> bool:
    return name == "" or any(ch in name for ch in '.[]"')


def paths_from_terraform(raw_paths: Iterable[Any]) -> List[Path]:
    """Convert a list of Terraform replace paths, dropping empty entries."""
    paths = []
    for raw in raw_paths or []:
        path = Path.from_terraform(raw)
        if path.segments:
            paths.append(path)
    return paths
