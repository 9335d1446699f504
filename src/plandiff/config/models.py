"""Pydantic models for analysis configuration (danger policy, limits, grouping)."""

from typing import Any, Dict, List
from pydantic import BaseModel, Field, field_validator
from ..diff.paths import Path


class SensitiveResource(BaseModel):
    """A resource type whose replacement or deletion is high impact."""
    resource_type: str = Field(..., description="Resource type (e.g. 'aws_db_instance')")

    class Config:
        frozen = True


class SensitiveProperty(BaseModel):
    """A resource type and property path combination flagged as sensitive."""
    resource_type: str = Field(..., description="Resource type the rule applies to")
    property: str = Field(..., description="Dotted property path; '[n]' denotes a list index")

    class Config:
        frozen = True

    def to_path(self) -> Path:
        return Path.parse(self.property)


class DangerPolicy(BaseModel):
    """Configured sensitive resource types and properties. Read-only during a run."""
    sensitive_resources: List[SensitiveResource] = Field(default_factory=list)
    sensitive_properties: List[SensitiveProperty] = Field(default_factory=list)

    class Config:
        frozen = True

    def is_sensitive_resource(self, resource_type: str) -> bool:
        return any(rule.resource_type == resource_type for rule in self.sensitive_resources)

    def property_paths(self, resource_type: str) -> List[Path]:
        """Sensitive property paths configured for one resource type."""
        return [rule.to_path() for rule in self.sensitive_properties if rule.resource_type == resource_type]

    def matches_property(self, resource_type: str, path: Path) -> bool:
        """
        Check a property path against the sensitive property rules.

        A rule matches when the path lies at or below the configured property,
        or when the path is an ancestor of it (the change carries the
        sensitive property inside its value). Rules that match nothing are
        simply ignored.
        """
        return any(path.overlaps(rule_path) for rule_path in self.property_paths(resource_type))


class PerformanceLimits(BaseModel):
    """Caps on how much property detail is captured per resource."""
    max_properties_per_resource: int = Field(default=100, ge=1)
    max_property_value_bytes: int = Field(default=10 * 1024, ge=1)
    max_total_bytes: int = Field(default=10 * 1024 * 1024, ge=1)

    class Config:
        frozen = True


DEFAULT_GROUPING_THRESHOLD = 10


class GroupingConfig(BaseModel):
    """Provider grouping switch and activation threshold."""
    enabled: bool = Field(default=True)
    threshold: int = Field(default=DEFAULT_GROUPING_THRESHOLD, ge=0, description="Minimum changed resources before grouping")

    class Config:
        frozen = True

    @field_validator("threshold")
    @classmethod
    def _default_when_zero(cls, value: int) -> int:
        return value or DEFAULT_GROUPING_THRESHOLD


class AnalysisConfig(BaseModel):
    """Complete configuration handed to the analysis engine."""
    danger_policy: DangerPolicy = Field(default_factory=DangerPolicy)
    performance: PerformanceLimits = Field(default_factory=PerformanceLimits)
    grouping: GroupingConfig = Field(default_factory=GroupingConfig)
    auto_expand_dangerous: bool = Field(default=True, description="Passed through to presentation")

    class Config:
        frozen = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisConfig":
        """Build from the YAML layout (top-level sensitive_* lists, performance, grouping)."""
        data = data or {}
        return cls(
            danger_policy=DangerPolicy(
                sensitive_resources=data.get("sensitive_resources") or [],
                sensitive_properties=data.get("sensitive_properties") or [],
            ),
            performance=PerformanceLimits(**(data.get("performance") or {})),
            grouping=GroupingConfig(**(data.get("grouping") or {})),
            auto_expand_dangerous=data.get("auto_expand_dangerous", True),
        )
