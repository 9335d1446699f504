"""Flag dangerous resource changes against the configured policy and assign a risk level."""

from typing import List, NamedTuple
from ..config.models import DangerPolicy
from ..contracts.property_changes import PropertyChangeAnalysis
from ..contracts.resource_analysis import RiskLevel
from ..ingest.models import ResourceAction


class DangerAssessment(NamedTuple):
    """Outcome of danger evaluation for one resource."""
    is_dangerous: bool
    reason: str
    risk_level: RiskLevel
    properties: List[str]


def evaluate_danger(
    resource_type: str,
    action: ResourceAction,
    changes: PropertyChangeAnalysis,
    policy: DangerPolicy,
) -> DangerAssessment:
    """
    Evaluate whether a resource change is dangerous.

    A change is dangerous when a sensitive resource type is replaced or
    deleted, or when a sensitive property changes during an update or
    replacement. Risk levels, first match wins:

    - critical: dangerous replacement of a sensitive resource type
    - high: any other dangerous change, and every deletion
    - medium: replacement that is not dangerous
    - low: everything else

    Args:
        resource_type: Resource type (e.g. 'aws_db_instance')
        action: Normalized resource action
        changes: Comparator result; its sensitive paths include changes dropped by truncation
        policy: Configured danger policy

    Returns:
        DangerAssessment with flag, reason, risk level and the sensitive properties involved
    """
    sensitive_type = policy.is_sensitive_resource(resource_type)
    reasons = []

    resource_trigger = sensitive_type and action in (ResourceAction.REPLACE, ResourceAction.DELETE)
    if resource_trigger:
        reasons.append(_sensitive_resource_reason(resource_type, action))

    properties = []
    if action in (ResourceAction.UPDATE, ResourceAction.REPLACE):
        for path in changes.sensitive_paths:
            label = path or resource_type
            if label not in properties:
                properties.append(label)
    if properties:
        reasons.append(_sensitive_property_reason(properties))

    is_dangerous = bool(reasons)

    if is_dangerous and sensitive_type and action == ResourceAction.REPLACE:
        risk_level = RiskLevel.CRITICAL
    elif is_dangerous or action == ResourceAction.DELETE:
        risk_level = RiskLevel.HIGH
    elif action == ResourceAction.REPLACE:
        risk_level = RiskLevel.MEDIUM
    else:
        risk_level = RiskLevel.LOW

    return DangerAssessment(
        is_dangerous=is_dangerous,
        reason=" and ".join(reasons),
        risk_level=risk_level,
        properties=properties,
    )


def _sensitive_resource_reason(resource_type: str, action: ResourceAction) -> str:
    """Describe a sensitive resource trigger, specific to common resource families."""
    if action == ResourceAction.DELETE:
        return "Sensitive resource deletion"

    resource_type_lower = resource_type.lower()
    if "rds" in resource_type_lower or "db_instance" in resource_type_lower or "database" in resource_type_lower:
        return "Database replacement"
    if "instance" in resource_type_lower or "virtual_machine" in resource_type_lower:
        return "Compute instance replacement"
    if "bucket" in resource_type_lower or "storage" in resource_type_lower:
        return "Storage replacement"
    if "security_group" in resource_type_lower or "firewall" in resource_type_lower:
        return "Security rule replacement"
    if "network" in resource_type_lower or "vpc" in resource_type_lower:
        return "Network infrastructure replacement"
    return "Sensitive resource replacement"


def _sensitive_property_reason(properties: List[str]) -> str:
    if len(properties) == 1:
        return f"Sensitive property change: {properties[0]}"
    return f"Sensitive property changes: {', '.join(properties)}"
