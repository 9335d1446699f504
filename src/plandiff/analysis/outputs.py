"""Analyse root module output changes."""

from typing import List, Sequence
from ..contracts.resource_analysis import OutputChange
from ..diff.comparator import SENSITIVE_VALUE, UNKNOWN_VALUE
from ..diff.values import Value
from ..ingest.models import OutputChangeInput, ResourceAction


def _flagged(mask) -> bool:
    return mask is not None and Value.from_json(mask).any_true()


def analyze_output(output: OutputChangeInput) -> OutputChange:
    """
    Mask and flag one output change.

    Sensitive outputs show the sensitive placeholder on both sides. Outputs
    whose value is only known after apply show the unknown placeholder as
    ``after``, even when they are also sensitive.
    """
    sensitive = _flagged(output.before_sensitive) or _flagged(output.after_sensitive)
    unknown = _flagged(output.after_unknown)

    before = Value.from_json(output.before)
    after = Value.from_json(output.after)
    if sensitive:
        before = SENSITIVE_VALUE
        after = SENSITIVE_VALUE
    if unknown:
        after = UNKNOWN_VALUE

    return OutputChange(
        name=output.name,
        action=output.action,
        sensitive=sensitive,
        unknown=unknown,
        is_no_op=output.action == ResourceAction.NO_OP,
        before=before,
        after=after,
    )


def analyze_outputs(outputs: Sequence[OutputChangeInput]) -> List[OutputChange]:
    """Analyse all output changes, sorted by output name."""
    return sorted((analyze_output(output) for output in outputs), key=lambda change: change.name)
