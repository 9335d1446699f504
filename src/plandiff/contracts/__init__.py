from .core_output import AnalysisResult, ChangeStatistics, ProviderGroup
from .property_changes import PropertyAction, PropertyChange, PropertyChangeAnalysis, UnknownKind
from .resource_analysis import ResourceAnalysis, ReplacementType, RiskLevel, DependencyInfo, OutputChange

__all__ = [
    "AnalysisResult",
    "ChangeStatistics",
    "ProviderGroup",
    "PropertyAction",
    "PropertyChange",
    "PropertyChangeAnalysis",
    "UnknownKind",
    "ResourceAnalysis",
    "ReplacementType",
    "RiskLevel",
    "DependencyInfo",
    "OutputChange",
]
