"""Recursive before/after value comparison producing ordered property changes."""

from typing import Any, Callable, List, Optional, Sequence
from ..config.models import PerformanceLimits
from ..contracts.property_changes import (
    PropertyAction,
    PropertyChange,
    PropertyChangeAnalysis,
    UnknownKind,
)
from ..utils.logging import get_logger
from .paths import Path, Key, Index, PathSegment
from .values import Value, ValueKind, NULL, SENSITIVE_PLACEHOLDER, UNKNOWN_PLACEHOLDER

logger = get_logger("diff.comparator")

SENSITIVE_VALUE = Value.string(SENSITIVE_PLACEHOLDER)
UNKNOWN_VALUE = Value.string(UNKNOWN_PLACEHOLDER)

SensitivityMatcher = Callable[[Path], bool]


class _Capture:
    """Mutable per-call state; never shared between resources."""

    def __init__(self, base_path: Path, replace_paths: Sequence[Path]):
        self.base_path = base_path
        self.replace_paths = tuple(replace_paths)
        self.changes: List[PropertyChange] = []
        self.sensitive_paths: List[str] = []
        self.count = 0
        self.total_size = 0
        self.truncated = False
        self.halted = False


class ValueComparator:
    """
    Deep comparator for plan values.

    Map keys are visited in sorted order and list elements by index, so the
    same inputs always yield the same change list. Values marked in the
    ``after_unknown`` mask are reported as updates to the unknown placeholder
    and never as removals. Sensitive values (from the plan's sensitivity masks
    or from the configured matcher) are replaced by the sensitive placeholder
    before they are stored.
    """

    def __init__(self, limits: Optional[PerformanceLimits] = None, is_sensitive: Optional[SensitivityMatcher] = None):
        self.limits = limits if limits is not None else PerformanceLimits()
        self.is_sensitive = is_sensitive or (lambda path: False)

    def compare(
        self,
        before: Any,
        after: Any,
        after_unknown: Any = None,
        base_path: Path = Path(),
        before_sensitive: Any = None,
        after_sensitive: Any = None,
        replace_paths: Sequence[Path] = (),
    ) -> PropertyChangeAnalysis:
        """
        Compare two values and collect their differences.

        Args:
            before: Value (or decoded JSON) before the change
            after: Value (or decoded JSON) after the change
            after_unknown: Boolean mask, same shape as ``after``, of unknown values
            base_path: Path prefixed to every emitted change
            before_sensitive: Boolean mask of sensitive values in ``before``
            after_sensitive: Boolean mask of sensitive values in ``after``
            replace_paths: Paths that force replacement of the resource

        Returns:
            PropertyChangeAnalysis with captured changes and counters
        """
        capture = _Capture(base_path, replace_paths)
        self._walk(
            base_path,
            _optional(before),
            _optional(after),
            _optional(after_unknown),
            _optional(before_sensitive),
            _optional(after_sensitive),
            capture,
        )

        if capture.truncated:
            logger.debug(
                f"Property capture truncated at {base_path or '<root>'}: "
                f"{len(capture.changes)} of {capture.count} changes kept"
            )

        return PropertyChangeAnalysis(
            changes=capture.changes,
            count=capture.count,
            sensitive_paths=capture.sensitive_paths,
            total_size_bytes=capture.total_size,
            truncated=capture.truncated,
        )

    def _walk(
        self,
        path: Path,
        before: Optional[Value],
        after: Optional[Value],
        unknown: Optional[Value],
        before_sensitive: Optional[Value],
        after_sensitive: Optional[Value],
        capture: _Capture,
    ) -> None:
        if unknown is not None and unknown.is_true():
            kind = UnknownKind.BOTH if _is_unknown_placeholder(before) else UnknownKind.AFTER
            self._emit(
                capture, path, PropertyAction.UPDATE, before, UNKNOWN_VALUE,
                self._sensitive(path, before_sensitive, after_sensitive), kind,
            )
            return

        has_before = _present(before)
        has_after = _present(after)
        pending_unknowns = unknown is not None and unknown.is_container and unknown.any_true()

        if has_before and has_after and before == after and not pending_unknowns:
            return

        container_kind = self._descend_kind(capture, path, before, after, unknown, has_before, has_after, pending_unknowns)
        if container_kind is None:
            if not has_before and not has_after:
                return
            if not has_before:
                action = PropertyAction.ADD
            elif not has_after:
                action = PropertyAction.REMOVE
            else:
                action = PropertyAction.UPDATE
            kind = UnknownKind.BEFORE if _is_unknown_placeholder(before) else UnknownKind.NONE
            self._emit(
                capture, path, action, before, after,
                self._sensitive(path, before_sensitive, after_sensitive), kind,
            )
            return

        for segment in self._child_segments(container_kind, before, after, unknown):
            self._walk(
                path.child(segment),
                _child(before, segment),
                _child(after, segment),
                _child_mask(unknown, segment),
                _child_mask(before_sensitive, segment),
                _child_mask(after_sensitive, segment),
                capture,
            )

    def _descend_kind(self, capture, path, before, after, unknown, has_before, has_after, pending_unknowns) -> Optional[ValueKind]:
        """Container kind to recurse into, or None to report this path as one change."""
        if has_before and has_after:
            if before.kind == after.kind and before.is_container:
                return before.kind
            return None
        one_side = before if has_before else after
        if one_side is not None and has_before != has_after:
            if not one_side.is_container:
                return None
            # Whole-container additions/removals are one change unless they are
            # the resource root or hide unknown values.
            if path == capture.base_path or pending_unknowns:
                return one_side.kind
            return None
        if pending_unknowns:
            return unknown.kind
        return None

    @staticmethod
    def _child_segments(kind: ValueKind, *sides: Optional[Value]) -> List[PathSegment]:
        if kind == ValueKind.MAP:
            keys = set()
            for side in sides:
                if side is not None and side.kind == ValueKind.MAP:
                    keys.update(side.keys())
            return [Key(key) for key in sorted(keys)]
        length = 0
        for side in sides:
            if side is not None and side.kind == ValueKind.LIST:
                length = max(length, len(side.items))
        return [Index(position) for position in range(length)]

    def _sensitive(self, path: Path, before_sensitive: Optional[Value], after_sensitive: Optional[Value]) -> bool:
        if before_sensitive is not None and before_sensitive.any_true():
            return True
        if after_sensitive is not None and after_sensitive.any_true():
            return True
        return self.is_sensitive(path)

    def _emit(
        self,
        capture: _Capture,
        path: Path,
        action: PropertyAction,
        before: Optional[Value],
        after: Optional[Value],
        sensitive: bool,
        unknown_kind: UnknownKind,
    ) -> None:
        if sensitive:
            label = str(path)
            if label not in capture.sensitive_paths:
                capture.sensitive_paths.append(label)
        if capture.halted:
            return
        capture.count += 1
        if len(capture.changes) >= self.limits.max_properties_per_resource:
            capture.truncated = True
            return

        shown_before = before if before is not None else NULL
        shown_after = after if after is not None else NULL
        if sensitive:
            shown_before = SENSITIVE_VALUE
            shown_after = SENSITIVE_VALUE
        if unknown_kind in (UnknownKind.AFTER, UnknownKind.BOTH):
            shown_after = UNKNOWN_VALUE
        if unknown_kind in (UnknownKind.BEFORE, UnknownKind.BOTH):
            shown_before = UNKNOWN_VALUE

        size = self._display_size(shown_before) + self._display_size(shown_after)
        if capture.total_size + size > self.limits.max_total_bytes:
            capture.truncated = True
            capture.halted = True
            return

        capture.changes.append(PropertyChange(
            path=path,
            name=path.name,
            action=action,
            before=shown_before,
            after=shown_after,
            sensitive=sensitive,
            unknown=unknown_kind != UnknownKind.NONE,
            unknown_kind=unknown_kind,
            size_bytes=size,
            triggers_replacement=any(path.overlaps(replace_path) for replace_path in capture.replace_paths),
        ))
        capture.total_size += size

    def _display_size(self, value: Value) -> int:
        if value.is_null:
            return 0
        size = len(value.serialize().encode("utf-8"))
        return min(size, self.limits.max_property_value_bytes)


def compare_values(
    before: Any,
    after: Any,
    after_unknown: Any = None,
    base_path: Path = Path(),
    limits: Optional[PerformanceLimits] = None,
) -> PropertyChangeAnalysis:
    """Compare two values with default limits and no sensitivity rules."""
    return ValueComparator(limits).compare(before, after, after_unknown, base_path)


def _optional(data: Any) -> Optional[Value]:
    if data is None:
        return None
    return Value.from_json(data)


def _present(value: Optional[Value]) -> bool:
    return value is not None and not value.is_null


def _is_unknown_placeholder(value: Optional[Value]) -> bool:
    return value is not None and value.kind == ValueKind.STRING and value.scalar == UNKNOWN_PLACEHOLDER


def _child(value: Optional[Value], segment: PathSegment) -> Optional[Value]:
    if value is None:
        return None
    if isinstance(segment, Key):
        return value.get(segment.name) if value.kind == ValueKind.MAP else None
    return value.at(segment.position) if value.kind == ValueKind.LIST else None


def _child_mask(mask: Optional[Value], segment: PathSegment) -> Optional[Value]:
    """Step into a boolean mask. A true mask covers all of its children."""
    if mask is not None and mask.is_true():
        return mask
    return _child(mask, segment)
