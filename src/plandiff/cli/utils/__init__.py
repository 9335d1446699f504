"""CLI utilities package."""

from pathlib import Path
from typing import Optional
from ...contracts.core_output import AnalysisResult
from ...utils.errors import PlanLoadError
from ...utils.logging import get_logger

logger = get_logger("cli.utils")


def resolve_file_path(file_path: str) -> Path:
    """
    Resolve a user-provided file path against the current directory.

    Raises:
        PlanLoadError: If the path does not exist or is not a file
    """
    path = Path(file_path)
    resolved_path = path if path.is_absolute() else Path.cwd() / path
    resolved_path = resolved_path.resolve()

    if not resolved_path.exists():
        raise PlanLoadError(f"File not found: {file_path}. Please check the file path and try again.")
    if not resolved_path.is_file():
        raise PlanLoadError(f"Path is not a file: {file_path}. Please provide a valid file path.")

    return resolved_path


def format_error(message: str, suggestion: Optional[str] = None) -> str:
    """
    Format error message with optional suggestion.

    Args:
        message: Error message
        suggestion: Optional suggestion or help text

    Returns:
        Formatted error string
    """
    error = f"Error: {message}"
    if suggestion:
        error += f"\nTip: {suggestion}"
    return error


def run_analysis(plan_json: str, config_path: Optional[str] = None) -> AnalysisResult:
    """
    Shared analysis execution helper for CLI commands.

    Args:
        plan_json: Path to Terraform plan JSON file
        config_path: Optional explicit config file

    Returns:
        AnalysisResult

    Raises:
        PlanDiffError: If loading or analysis fails
    """
    from ... import analyze as analyze_core

    plan_path = resolve_file_path(plan_json)
    logger.debug(f"Resolved plan path: {plan_path}")
    return analyze_core(str(plan_path), config_path=config_path)


def format_json_output(result: AnalysisResult) -> str:
    """Render an AnalysisResult as indented JSON."""
    return result.model_dump_json(indent=2)


__all__ = ["resolve_file_path", "run_analysis", "format_error", "format_json_output"]
