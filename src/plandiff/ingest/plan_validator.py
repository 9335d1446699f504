"""Validate Terraform plan JSON structure."""

from typing import Dict, Any, List
from ..utils.errors import PlanLoadError
from ..utils.logging import get_logger

logger = get_logger("ingest.plan_validator")

SUPPORTED_FORMAT_VERSIONS = ["0.1", "0.2", "1.0", "1.1", "1.2"]


def validate_plan_structure(plan_data: Dict[str, Any]) -> None:
    """
    Validate the top-level structure of a Terraform plan JSON document.

    Args:
        plan_data: Parsed Terraform plan JSON

    Raises:
        PlanLoadError: If plan structure is invalid
    """
    if not isinstance(plan_data, dict):
        raise PlanLoadError("Plan JSON must be an object at the top level.")

    if "format_version" not in plan_data:
        raise PlanLoadError(
            "Plan JSON missing required field: format_version. "
            "Generate a plan using: terraform show -json plan.tfplan > plan.json"
        )

    format_version = plan_data["format_version"]
    if not isinstance(format_version, str):
        raise PlanLoadError("Plan 'format_version' must be a string.")

    version_major_minor = ".".join(format_version.split(".")[:2])
    if version_major_minor not in SUPPORTED_FORMAT_VERSIONS:
        logger.warning(
            f"Plan format version '{format_version}' may not be fully supported. "
            f"Supported versions: {', '.join(SUPPORTED_FORMAT_VERSIONS)}"
        )

    if "resource_changes" in plan_data and not isinstance(plan_data["resource_changes"], list):
        raise PlanLoadError("Plan 'resource_changes' must be a list.")

    if "output_changes" in plan_data and not isinstance(plan_data["output_changes"], dict):
        raise PlanLoadError("Plan 'output_changes' must be an object.")

    terraform_version = plan_data.get("terraform_version")
    if terraform_version is not None and not isinstance(terraform_version, str):
        raise PlanLoadError("Plan 'terraform_version' must be a string.")

    logger.debug("Plan structure validation passed")


def validate_resource_change(resource: Any) -> List[str]:
    """
    Validate a single resource change entry.

    Args:
        resource: Resource change entry from ``resource_changes``

    Returns:
        List of validation warnings (empty if valid)
    """
    if not isinstance(resource, dict):
        return ["Resource change must be an object"]

    warnings = []
    missing_fields = [field for field in ("address", "type", "change") if field not in resource]
    if missing_fields:
        warnings.append(f"Missing required fields: {', '.join(missing_fields)}")

    change = resource.get("change")
    if isinstance(change, dict):
        if "actions" not in change:
            warnings.append("Resource change missing 'actions' field")
        elif not isinstance(change["actions"], list):
            warnings.append("Resource change 'actions' must be a list")
    elif change is not None:
        warnings.append("Resource 'change' must be an object")

    return warnings


def get_plan_summary(plan_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract summary information from a plan.

    Args:
        plan_data: Parsed Terraform plan JSON

    Returns:
        Dictionary with versions, resource count and action counts
    """
    resource_changes = plan_data.get("resource_changes") or []

    action_counts = {"create": 0, "update": 0, "delete": 0, "replace": 0, "read": 0, "no-op": 0}
    for resource in resource_changes:
        change = resource.get("change") if isinstance(resource, dict) else None
        actions = change.get("actions") if isinstance(change, dict) else None
        if not isinstance(actions, list):
            continue
        if "delete" in actions and "create" in actions:
            action_counts["replace"] += 1
        elif not actions:
            action_counts["no-op"] += 1
        elif actions[0] in action_counts:
            action_counts[actions[0]] += 1

    return {
        "format_version": plan_data.get("format_version", "unknown"),
        "terraform_version": plan_data.get("terraform_version", "unknown"),
        "resource_count": len(resource_changes),
        "output_count": len(plan_data.get("output_changes") or {}),
        "action_counts": action_counts,
    }
