"""Translate Terraform's raw plan JSON into the input model of the analysis engine."""

import re
from typing import Dict, Any, List, Optional
from ..diff.paths import paths_from_terraform
from ..utils.errors import NormalizationError
from ..utils.logging import get_logger
from .models import PlanData, ResourceChangeInput, OutputChangeInput, ResourceAction
from .plan_validator import validate_resource_change

logger = get_logger("ingest.plan_normalizer")

_INDEX_RE = re.compile(r'\[[^\]]*\]')

# Reference roots that never name a managed resource.
_NON_RESOURCE_ROOTS = {"var", "local", "path", "count", "each", "self", "terraform", "module"}

_SINGLE_ACTIONS = {
    "create": ResourceAction.CREATE,
    "read": ResourceAction.READ,
    "update": ResourceAction.UPDATE,
    "delete": ResourceAction.DELETE,
    "no-op": ResourceAction.NO_OP,
}


def normalize_action(actions: Any) -> Optional[ResourceAction]:
    """
    Map a Terraform action list to a single ResourceAction.

    ``[]`` and ``["no-op"]`` are no-ops, any list holding both ``delete`` and
    ``create`` (in either order) is a replacement, and single actions map
    directly. Anything else returns None.
    """
    if not isinstance(actions, list):
        return None
    if not actions:
        return ResourceAction.NO_OP
    if "delete" in actions and "create" in actions:
        return ResourceAction.REPLACE
    if len(actions) == 1 and isinstance(actions[0], str):
        return _SINGLE_ACTIONS.get(actions[0])
    return None


def strip_indices(address: str) -> str:
    """Drop instance keys: ``module.app[0].aws_instance.web["a"]`` -> ``module.app.aws_instance.web``."""
    return _INDEX_RE.sub("", address)


def extract_module_path(address: str) -> str:
    """
    Module hierarchy of a resource address.

    ``module.app.module.storage.aws_s3_bucket.data`` gives ``app/storage``;
    root module resources give ``-``.
    """
    parts = strip_indices(address).split(".")
    modules = [parts[i + 1] for i, part in enumerate(parts[:-1]) if part == "module"]
    return "/".join(modules) if modules else "-"


def _reference_to_address(reference: str) -> Optional[str]:
    """Resource address named by an expression reference, or None."""
    parts = strip_indices(reference).split(".")
    if parts[0] == "data":
        return ".".join(parts[:3]) if len(parts) >= 3 else None
    if parts[0] in _NON_RESOURCE_ROOTS or len(parts) < 2:
        return None
    return ".".join(parts[:2])


def _collect_references(expressions: Any, found: List[str]) -> None:
    if isinstance(expressions, dict):
        for ref in expressions.get("references") or []:
            if isinstance(ref, str):
                address = _reference_to_address(ref)
                if address and address not in found:
                    found.append(address)
        for value in expressions.values():
            _collect_references(value, found)
    elif isinstance(expressions, list):
        for item in expressions:
            _collect_references(item, found)


def _build_configuration_dependencies(plan_data: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Map unindexed resource addresses to the addresses they depend on.

    Reads ``configuration.root_module`` recursively. Explicit ``depends_on``
    entries and expression ``references`` are both dependencies; addresses are
    qualified with the module they are declared in.
    """
    dependencies: Dict[str, List[str]] = {}
    configuration = plan_data.get("configuration") or {}

    def process_module(module: Dict[str, Any], prefix: str) -> None:
        for resource in module.get("resources") or []:
            local_address = resource.get("address")
            if not local_address:
                continue
            found: List[str] = []
            for dep in resource.get("depends_on") or []:
                if isinstance(dep, str) and dep not in found:
                    found.append(dep)
            _collect_references(resource.get("expressions") or {}, found)
            qualify = (lambda addr: f"{prefix}.{addr}") if prefix else (lambda addr: addr)
            address = qualify(local_address)
            dependencies[address] = [qualify(dep) for dep in found if qualify(dep) != address]

        for name, call in (module.get("module_calls") or {}).items():
            child = (call or {}).get("module") or {}
            child_prefix = f"{prefix}.module.{name}" if prefix else f"module.{name}"
            process_module(child, child_prefix)

    process_module(configuration.get("root_module") or {}, "")
    return dependencies


def _provider_label(provider_name: Optional[str]) -> Optional[str]:
    """``registry.terraform.io/hashicorp/aws`` -> ``aws``."""
    if not provider_name:
        return None
    return provider_name.rstrip("/").split("/")[-1] or None


def _normalize_resource_change(entry: Dict[str, Any], configuration_dependencies: Dict[str, List[str]]) -> ResourceChangeInput:
    address = entry["address"]
    change = entry.get("change") if isinstance(entry.get("change"), dict) else {}

    depends_on = list(configuration_dependencies.get(strip_indices(address), []))
    for dep in entry.get("depends_on") or []:
        if dep not in depends_on:
            depends_on.append(dep)

    return ResourceChangeInput(
        address=address,
        resource_type=entry.get("type") or None,
        name=entry.get("name") or "",
        action=normalize_action(change.get("actions")),
        provider_name=_provider_label(entry.get("provider_name")),
        module_path=extract_module_path(address),
        before=change.get("before"),
        after=change.get("after"),
        after_unknown=change.get("after_unknown"),
        before_sensitive=change.get("before_sensitive"),
        after_sensitive=change.get("after_sensitive"),
        replace_paths=paths_from_terraform(change.get("replace_paths")),
        depends_on=depends_on,
    )


def _normalize_output_change(name: str, change: Any) -> OutputChangeInput:
    change = change if isinstance(change, dict) else {}
    return OutputChangeInput(
        name=name,
        action=normalize_action(change.get("actions")) or ResourceAction.NO_OP,
        before=change.get("before"),
        after=change.get("after"),
        after_unknown=change.get("after_unknown"),
        before_sensitive=change.get("before_sensitive"),
        after_sensitive=change.get("after_sensitive"),
    )


def normalize_plan(plan_data: Dict[str, Any]) -> PlanData:
    """
    Normalize Terraform plan JSON into PlanData.

    Resource entries without an address cannot be identified and are dropped
    with a warning. Entries with a missing type or an unrecognised action are
    kept (with ``None`` in that field) so the engine can report them.

    Args:
        plan_data: Raw Terraform plan JSON dictionary

    Returns:
        PlanData consumed by the analysis engine

    Raises:
        NormalizationError: If the plan as a whole cannot be normalized
    """
    if not isinstance(plan_data, dict):
        raise NormalizationError("Plan data must be a dictionary")

    resource_changes = plan_data.get("resource_changes") or []
    if not isinstance(resource_changes, list):
        raise NormalizationError("Plan 'resource_changes' must be a list")

    try:
        configuration_dependencies = _build_configuration_dependencies(plan_data)
    except (AttributeError, TypeError) as e:
        raise NormalizationError(f"Failed to read plan configuration: {e}")

    warnings: List[str] = []
    resources: List[ResourceChangeInput] = []

    for position, entry in enumerate(resource_changes):
        if not isinstance(entry, dict) or not entry.get("address"):
            message = f"Skipping resource change #{position}: no address"
            logger.warning(message)
            warnings.append(message)
            continue

        for problem in validate_resource_change(entry):
            logger.debug(f"{entry['address']}: {problem}")

        try:
            resources.append(_normalize_resource_change(entry, configuration_dependencies))
        except (ValueError, TypeError) as e:
            message = f"Skipping resource {entry['address']}: {e}"
            logger.warning(message)
            warnings.append(message)

    output_changes = plan_data.get("output_changes") or {}
    if not isinstance(output_changes, dict):
        raise NormalizationError("Plan 'output_changes' must be an object")
    outputs = [_normalize_output_change(name, output_changes[name]) for name in sorted(output_changes)]

    logger.info(f"Normalized {len(resources)} resource changes and {len(outputs)} output changes")
    return PlanData(
        format_version=str(plan_data.get("format_version") or "unknown"),
        terraform_version=str(plan_data.get("terraform_version") or "unknown"),
        resource_changes=resources,
        output_changes=outputs,
        warnings=warnings,
    )
