"""Custom exception classes for plandiff."""


class PlanDiffError(Exception):
    """Base exception for all plandiff errors."""
    pass


class PlanLoadError(PlanDiffError):
    """Raised when Terraform plan JSON cannot be loaded or is invalid."""
    pass


class NormalizationError(PlanDiffError):
    """Raised when plan normalization fails."""
    pass


class ConfigError(PlanDiffError):
    """Raised when configuration is invalid or missing."""
    pass


class AnalysisError(PlanDiffError):
    """Raised when change analysis fails unexpectedly."""
    pass
