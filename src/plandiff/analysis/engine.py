"""Analysis engine: (PlanData, AnalysisConfig) -> AnalysisResult."""

from typing import Any, List, Optional
from ..config.models import AnalysisConfig
from ..contracts.core_output import AnalysisResult
from ..contracts.property_changes import PropertyChangeAnalysis
from ..contracts.resource_analysis import DependencyInfo, ResourceAnalysis
from ..diff.comparator import ValueComparator
from ..diff.paths import Path
from ..graph.dependency_graph import DependencyGraph
from ..ingest.models import PlanData, ResourceAction, ResourceChangeInput
from ..utils.errors import AnalysisError, PlanDiffError
from ..utils.logging import get_logger
from .aggregator import aggregate
from .danger import evaluate_danger
from .outputs import analyze_outputs
from .replacement import classify_replacement, computed_replace_flags, replacement_reasons

logger = get_logger("analysis.engine")

TOP_CHANGES_LIMIT = 3


def derive_provider(resource: ResourceChangeInput) -> str:
    """Provider from the plan's provider config, else the resource type prefix ('aws' for 'aws_s3_bucket')."""
    if resource.provider_name:
        return resource.provider_name
    prefix = (resource.resource_type or "").split("_")[0]
    return prefix or "unknown"


def _id_of(state: Any) -> Optional[str]:
    if isinstance(state, dict):
        value = state.get("id")
        if isinstance(value, str) and value:
            return value
    return None


def extract_physical_id(resource: ResourceChangeInput) -> str:
    return _id_of(resource.before) or "-"


def extract_planned_id(resource: ResourceChangeInput) -> str:
    if resource.action == ResourceAction.DELETE or resource.after is None:
        return "N/A"
    return _id_of(resource.after) or "-"


def top_changes(action: ResourceAction, changes: PropertyChangeAnalysis) -> List[str]:
    """First changed property names of an in-place update."""
    if action != ResourceAction.UPDATE:
        return []
    names: List[str] = []
    for change in changes.changes:
        name = change.name or str(change.path)
        if name and name not in names:
            names.append(name)
        if len(names) == TOP_CHANGES_LIMIT:
            break
    return names


def analyze_resource(
    resource: ResourceChangeInput,
    config: AnalysisConfig,
    graph: Optional[DependencyGraph] = None,
) -> ResourceAnalysis:
    """
    Analyse one well-formed resource change.

    Runs the value comparator (with the policy's sensitive properties for the
    resource type), classifies the replacement and evaluates danger.
    """
    policy = config.danger_policy
    resource_type = resource.resource_type
    comparator = ValueComparator(
        limits=config.performance,
        is_sensitive=lambda path: policy.matches_property(resource_type, path),
    )
    changes = comparator.compare(
        resource.before,
        resource.after,
        after_unknown=resource.after_unknown,
        base_path=Path(),
        before_sensitive=resource.before_sensitive,
        after_sensitive=resource.after_sensitive,
        replace_paths=resource.replace_paths,
    )

    flags = computed_replace_flags(resource.replace_paths, resource.after_unknown)
    replacement_type = classify_replacement(resource.action, resource.replace_paths, flags)
    danger = evaluate_danger(resource_type, resource.action, changes, policy)

    logger.debug(
        f"{resource.address}: action={resource.action.value} replacement={replacement_type.value} "
        f"risk={danger.risk_level.value} changes={changes.count}"
        + (f" dangerous=({danger.reason})" if danger.is_dangerous else "")
    )

    dependencies = DependencyInfo()
    if graph is not None:
        dependencies = DependencyInfo(
            depends_on=graph.depends_on(resource.address),
            used_by=graph.used_by(resource.address),
        )

    return ResourceAnalysis(
        address=resource.address,
        resource_type=resource_type,
        name=resource.name,
        action=resource.action,
        provider=derive_provider(resource),
        module_path=resource.module_path or "-",
        physical_id=extract_physical_id(resource),
        planned_id=extract_planned_id(resource),
        property_changes=changes,
        replacement_type=replacement_type,
        replacement_reasons=replacement_reasons(resource.replace_paths),
        is_dangerous=danger.is_dangerous,
        danger_reason=danger.reason,
        danger_properties=danger.properties,
        risk_level=danger.risk_level,
        top_changes=top_changes(resource.action, changes),
        dependencies=dependencies,
    )


def _malformed_reason(resource: ResourceChangeInput) -> Optional[str]:
    missing = []
    if not resource.resource_type:
        missing.append("type")
    if resource.action is None:
        missing.append("action")
    if missing:
        return f"Skipping malformed resource {resource.address}: missing or unrecognised {' and '.join(missing)}"
    return None


def analyze_plan(plan: Optional[PlanData], config: Optional[AnalysisConfig] = None) -> AnalysisResult:
    """
    Analyse every resource and output change of a plan.

    Malformed resources are skipped and reported in ``warnings``; truncated
    property capture is reported the same way. An absent or empty plan gives
    an empty result.

    Args:
        plan: Normalized plan (None is treated as an empty plan)
        config: Analysis configuration (defaults apply when None)

    Returns:
        AnalysisResult with sorted resources, statistics and grouping decision

    Raises:
        AnalysisError: If analysis fails unexpectedly
    """
    if plan is None:
        plan = PlanData()
    if config is None:
        config = AnalysisConfig()

    try:
        warnings = list(plan.warnings)
        valid: List[ResourceChangeInput] = []
        for resource in plan.resource_changes:
            reason = _malformed_reason(resource)
            if reason:
                logger.warning(reason)
                warnings.append(reason)
                continue
            valid.append(resource)

        graph = DependencyGraph()
        graph.build_from_resources(valid)

        analyses = []
        for resource in valid:
            analysis = analyze_resource(resource, config, graph)
            if analysis.property_changes.truncated:
                message = (
                    f"Property changes of {resource.address} truncated: "
                    f"{len(analysis.property_changes.changes)} of {analysis.property_changes.count} captured"
                )
                logger.warning(message)
                warnings.append(message)
            analyses.append(analysis)

        logger.info(f"Analysed {len(analyses)} resources ({len(plan.resource_changes) - len(valid)} skipped)")

        return aggregate(
            analyses,
            grouping=config.grouping,
            output_changes=analyze_outputs(plan.output_changes),
            auto_expand_dangerous=config.auto_expand_dangerous,
            warnings=warnings,
        )
    except PlanDiffError:
        raise
    except Exception as e:
        raise AnalysisError(f"Failed to analyse plan: {e}") from e
