"""Combine per-resource results into statistics, provider groups and display order."""

from typing import Dict, List, Optional, Sequence, Tuple
from ..config.models import GroupingConfig
from ..contracts.core_output import AnalysisResult, ChangeStatistics, ProviderGroup
from ..contracts.resource_analysis import ResourceAnalysis, ReplacementType, OutputChange
from ..ingest.models import ResourceAction
from ..utils.logging import get_logger

logger = get_logger("analysis.aggregator")

# Lower tier sorts first.
ACTION_TIERS = {
    ResourceAction.DELETE: 0,
    ResourceAction.REPLACE: 1,
    ResourceAction.UPDATE: 2,
    ResourceAction.CREATE: 3,
    ResourceAction.NO_OP: 4,
    ResourceAction.READ: 4,
}


def sort_key(resource: ResourceAnalysis) -> Tuple[int, bool, str]:
    """Action tier, then dangerous first, then address."""
    return (ACTION_TIERS.get(resource.action, 4), not resource.is_dangerous, resource.address)


def sort_resources(resources: Sequence[ResourceAnalysis]) -> List[ResourceAnalysis]:
    return sorted(resources, key=sort_key)


def calculate_statistics(resources: Sequence[ResourceAnalysis]) -> ChangeStatistics:
    """Tally resources by action, replacement type and danger flag."""
    counts = {
        "added": 0,
        "removed": 0,
        "modified": 0,
        "unmodified": 0,
        "replacements": 0,
        "conditionals": 0,
        "high_risk": 0,
    }

    for resource in resources:
        if resource.action == ResourceAction.CREATE:
            counts["added"] += 1
        elif resource.action == ResourceAction.DELETE:
            counts["removed"] += 1
        elif resource.action == ResourceAction.UPDATE:
            counts["modified"] += 1
        elif resource.action == ResourceAction.REPLACE:
            if resource.replacement_type != ReplacementType.NEVER:
                counts["replacements"] += 1
        else:
            counts["unmodified"] += 1

        if resource.replacement_type == ReplacementType.CONDITIONAL:
            counts["conditionals"] += 1
        if resource.is_dangerous:
            counts["high_risk"] += 1

    total = counts["added"] + counts["removed"] + counts["modified"] + counts["replacements"]
    return ChangeStatistics(total=total, **counts)


def should_group_by_provider(resources: Sequence[ResourceAnalysis], grouping: GroupingConfig) -> bool:
    """Group when enabled, enough resources change, and more than one provider is involved."""
    if not grouping.enabled:
        return False

    changed = [r for r in resources if r.is_changed]
    if len(changed) < grouping.threshold:
        return False

    providers = {r.provider for r in changed}
    return len(providers) > 1


def group_by_provider(resources: Sequence[ResourceAnalysis]) -> List[ProviderGroup]:
    """Changed resources per provider, providers by name, resources in display order."""
    buckets: Dict[str, List[ResourceAnalysis]] = {}
    for resource in resources:
        if not resource.is_changed:
            continue
        buckets.setdefault(resource.provider, []).append(resource)

    groups = []
    for provider in sorted(buckets):
        members = sort_resources(buckets[provider])
        groups.append(ProviderGroup(
            provider=provider,
            resources=members,
            has_dangerous=any(r.is_dangerous for r in members),
        ))
    return groups


def aggregate(
    resources: Sequence[ResourceAnalysis],
    grouping: Optional[GroupingConfig] = None,
    output_changes: Sequence[OutputChange] = (),
    auto_expand_dangerous: bool = True,
    warnings: Sequence[str] = (),
) -> AnalysisResult:
    """
    Build the final AnalysisResult from per-resource analyses.

    Args:
        resources: Per-resource analyses in any order
        grouping: Provider grouping configuration (defaults apply when None)
        output_changes: Analysed output changes
        auto_expand_dangerous: Presentation hint passed through untouched
        warnings: Warnings recorded while analysing

    Returns:
        AnalysisResult with sorted resources, statistics and grouping decision
    """
    if grouping is None:
        grouping = GroupingConfig()
    ordered = sort_resources(resources)
    statistics = calculate_statistics(ordered)
    grouped = should_group_by_provider(ordered, grouping)
    provider_groups = group_by_provider(ordered) if grouped else []

    logger.info(
        f"Aggregated {len(ordered)} resources: {statistics.added} to add, {statistics.modified} to change, "
        f"{statistics.removed} to destroy, {statistics.replacements} to replace, {statistics.high_risk} high risk"
    )
    if grouped:
        logger.debug(f"Grouping by provider: {[g.provider for g in provider_groups]}")

    return AnalysisResult(
        resources=ordered,
        output_changes=sorted(output_changes, key=lambda change: change.name),
        statistics=statistics,
        group_by_provider=grouped,
        provider_groups=provider_groups,
        auto_expand_dangerous=auto_expand_dangerous,
        warnings=list(warnings),
    )
