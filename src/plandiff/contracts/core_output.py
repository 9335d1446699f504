"""Pydantic model for the final analysis result handed to presentation."""

from typing import List
from pydantic import BaseModel, Field
from .resource_analysis import ResourceAnalysis, OutputChange


class ChangeStatistics(BaseModel):
    """Counts of resource changes by category."""
    total: int = Field(default=0, ge=0, description="Added + removed + modified + replacements")
    added: int = Field(default=0, ge=0, description="Resources to be created")
    removed: int = Field(default=0, ge=0, description="Resources to be destroyed")
    modified: int = Field(default=0, ge=0, description="Resources updated in place")
    unmodified: int = Field(default=0, ge=0, description="No-op and read resources")
    replacements: int = Field(default=0, ge=0, description="Replace actions with a replacement type other than Never")
    conditionals: int = Field(default=0, ge=0, description="Replacements that depend on unknown values")
    high_risk: int = Field(default=0, ge=0, description="All dangerous resources")

    class Config:
        frozen = True


class ProviderGroup(BaseModel):
    """Changed resources of one provider, in display order."""
    provider: str = Field(..., description="Provider name")
    resources: List[ResourceAnalysis] = Field(default_factory=list)
    has_dangerous: bool = Field(default=False, description="Any resource in the group is dangerous")

    class Config:
        frozen = True


class AnalysisResult(BaseModel):
    """Analysis result contract - built once per run, never mutated."""
    version: str = Field(default="1.0.0", description="Output contract version")
    resources: List[ResourceAnalysis] = Field(default_factory=list, description="All resources, sorted")
    output_changes: List[OutputChange] = Field(default_factory=list, description="Output changes, by name")
    statistics: ChangeStatistics = Field(default_factory=ChangeStatistics)
    group_by_provider: bool = Field(default=False)
    provider_groups: List[ProviderGroup] = Field(default_factory=list, description="Populated when grouping is active")
    auto_expand_dangerous: bool = Field(default=True, description="Presentation hint, passed through")
    warnings: List[str] = Field(default_factory=list, description="Skipped or truncated resources")

    class Config:
        frozen = True
