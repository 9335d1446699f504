"""Per-resource analysis contracts."""

from enum import Enum
from typing import List
from pydantic import BaseModel, Field, field_serializer
from ..diff.values import Value, NULL
from ..ingest.models import ResourceAction
from .property_changes import PropertyChangeAnalysis


class ReplacementType(str, Enum):
    """Whether a resource change destroys and recreates the resource."""
    NEVER = "Never"
    CONDITIONAL = "Conditional"
    ALWAYS = "Always"


class RiskLevel(str, Enum):
    """Per-resource risk level (4-tier)."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_RANKS[self]


_RISK_RANKS = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


class DependencyInfo(BaseModel):
    """Resource dependency relationships within the plan."""
    depends_on: List[str] = Field(default_factory=list, description="Resources this change depends on")
    used_by: List[str] = Field(default_factory=list, description="Resources that depend on this change")

    class Config:
        frozen = True


class ResourceAnalysis(BaseModel):
    """Complete analysis of one resource change."""
    address: str = Field(..., description="Full resource address")
    resource_type: str = Field(..., description="Resource type (e.g. 'aws_instance')")
    name: str = Field(default="", description="Resource name")
    action: ResourceAction = Field(..., description="Normalized action")
    provider: str = Field(default="unknown", description="Provider name (e.g. 'aws', 'azurerm')")
    module_path: str = Field(default="-", description="Module hierarchy ('app/storage') or '-'")
    physical_id: str = Field(default="-", description="Current physical ID")
    planned_id: str = Field(default="-", description="Planned physical ID")
    property_changes: PropertyChangeAnalysis = Field(default_factory=PropertyChangeAnalysis)
    replacement_type: ReplacementType = Field(default=ReplacementType.NEVER)
    replacement_reasons: List[str] = Field(default_factory=list, description="Rendered replace paths")
    is_dangerous: bool = Field(default=False)
    danger_reason: str = Field(default="")
    danger_properties: List[str] = Field(default_factory=list, description="Sensitive properties that changed")
    risk_level: RiskLevel = Field(default=RiskLevel.LOW)
    top_changes: List[str] = Field(default_factory=list, description="First changed properties of an update")
    dependencies: DependencyInfo = Field(default_factory=DependencyInfo)

    class Config:
        frozen = True

    @property
    def is_changed(self) -> bool:
        return self.action.is_change


class OutputChange(BaseModel):
    """A change to a root module output, already masked."""
    name: str = Field(..., description="Output name")
    action: ResourceAction = Field(..., description="Normalized action")
    sensitive: bool = Field(default=False)
    unknown: bool = Field(default=False, description="Planned value known only after apply")
    is_no_op: bool = Field(default=False)
    before: Value = Field(default=NULL)
    after: Value = Field(default=NULL)

    class Config:
        arbitrary_types_allowed = True
        frozen = True

    @field_serializer("before", "after")
    def _dump_value(self, value: Value):
        return value.to_json()
