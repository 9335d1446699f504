"""Classify whether a resource change is a definite, conditional or non-replacement."""

from typing import Any, Dict, List, Sequence
from ..contracts.resource_analysis import ReplacementType
from ..diff.paths import Path, Key
from ..diff.values import Value, ValueKind
from ..ingest.models import ResourceAction


def classify_replacement(
    action: ResourceAction,
    replace_paths: Sequence[Path],
    computed_flags: Dict[Path, bool],
) -> ReplacementType:
    """
    Derive the replacement type of a resource change.

    Args:
        action: Normalized resource action
        replace_paths: Paths whose change forces replacement
        computed_flags: Per replace path, True when its value is unknown at plan time

    Returns:
        NEVER for non-replace actions, CONDITIONAL when any trigger depends on
        an unknown value, ALWAYS otherwise
    """
    if action != ResourceAction.REPLACE:
        return ReplacementType.NEVER

    if any(computed_flags.get(path, False) for path in replace_paths):
        return ReplacementType.CONDITIONAL

    return ReplacementType.ALWAYS


def computed_replace_flags(replace_paths: Sequence[Path], after_unknown: Any) -> Dict[Path, bool]:
    """
    Look up each replace path in the ``after_unknown`` mask.

    A path is computed when the mask marks it, one of its ancestors, or any
    value nested below it as unknown.
    """
    mask = Value.from_json(after_unknown) if after_unknown is not None else None
    flags = {}
    for path in replace_paths:
        flags[path] = _is_computed(mask, path)
    return flags


def _is_computed(mask: Any, path: Path) -> bool:
    current = mask
    for segment in path:
        if current is None:
            return False
        if current.is_true():
            return True
        if isinstance(segment, Key):
            current = current.get(segment.name) if current.kind == ValueKind.MAP else None
        else:
            current = current.at(segment.position) if current.kind == ValueKind.LIST else None
    return current is not None and current.any_true()


def replacement_reasons(replace_paths: Sequence[Path]) -> List[str]:
    """Human-readable rendering of each replace path (e.g. 'network_interface[0].subnet_id')."""
    return [str(path) for path in replace_paths if str(path)]
