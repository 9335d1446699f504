"""plandiff - Deterministic diff and risk analysis of Terraform plans."""

from typing import Optional
from .analysis.engine import analyze_plan
from .config import load_analysis_config
from .contracts.core_output import AnalysisResult
from .ingest.plan_loader import load_plan_json
from .ingest.plan_normalizer import normalize_plan
from .utils.logging import setup_logging, get_logger
from .utils.errors import PlanDiffError

__version__ = "0.1.0"

__all__ = ["analyze", "analyze_plan", "AnalysisResult", "PlanDiffError"]

setup_logging()
logger = get_logger("plandiff")


def analyze(plan_json_path: str, config_path: Optional[str] = None) -> AnalysisResult:
    """
    Analyse a Terraform plan JSON file.

    Args:
        plan_json_path: Output of ``terraform show -json``
        config_path: Optional config file layered over the default configuration

    Returns:
        AnalysisResult for the plan

    Raises:
        PlanDiffError: If the plan or the configuration cannot be loaded, or analysis fails
    """
    logger.info(f"Starting analysis of plan: {plan_json_path}")

    config = load_analysis_config(config_path)
    plan_data = load_plan_json(plan_json_path)
    plan = normalize_plan(plan_data)

    if not plan.resource_changes:
        logger.warning("No resource changes found in plan")

    result = analyze_plan(plan, config)
    stats = result.statistics
    logger.info(
        f"Analysis complete: {stats.total} changes, {stats.high_risk} dangerous "
        f"({len(result.warnings)} warnings)"
    )
    return result
