"""Pydantic models for normalized plan input."""

from enum import Enum
from typing import List, Optional, Any
from pydantic import BaseModel, Field
from ..diff.paths import Path


class ResourceAction(str, Enum):
    """Normalized resource action types."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    REPLACE = "replace"
    READ = "read"
    NO_OP = "no-op"

    @property
    def is_change(self) -> bool:
        return self not in (ResourceAction.NO_OP, ResourceAction.READ)


class ResourceChangeInput(BaseModel):
    """One resource change as handed over by the plan loader."""
    address: str = Field(..., description="Full resource address (e.g. 'module.app.aws_instance.web[0]')")
    resource_type: Optional[str] = Field(None, description="Resource type, None when the plan omitted it")
    name: str = Field(default="", description="Resource name within its module")
    action: Optional[ResourceAction] = Field(None, description="Normalized action, None when unrecognised")
    provider_name: Optional[str] = Field(None, description="Provider configuration name from the plan")
    module_path: Optional[str] = Field(None, description="Module hierarchy path ('app/storage')")
    before: Any = Field(default=None, description="State before the change")
    after: Any = Field(default=None, description="Planned state after the change")
    after_unknown: Any = Field(default=None, description="Boolean mask of values known only after apply")
    before_sensitive: Any = Field(default=None, description="Boolean mask of sensitive values before the change")
    after_sensitive: Any = Field(default=None, description="Boolean mask of sensitive values after the change")
    replace_paths: List[Path] = Field(default_factory=list, description="Paths whose change forces replacement")
    depends_on: List[str] = Field(default_factory=list, description="Addresses this resource depends on")

    class Config:
        arbitrary_types_allowed = True
        frozen = True


class OutputChangeInput(BaseModel):
    """One root module output change."""
    name: str = Field(..., description="Output name")
    action: ResourceAction = Field(default=ResourceAction.NO_OP, description="Normalized action")
    before: Any = Field(default=None)
    after: Any = Field(default=None)
    after_unknown: Any = Field(default=None)
    before_sensitive: Any = Field(default=None)
    after_sensitive: Any = Field(default=None)

    class Config:
        frozen = True


class PlanData(BaseModel):
    """Normalized Terraform plan - the in-memory graph the analysis engine consumes."""
    format_version: str = Field(default="unknown")
    terraform_version: str = Field(default="unknown")
    resource_changes: List[ResourceChangeInput] = Field(default_factory=list)
    output_changes: List[OutputChangeInput] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list, description="Entries dropped during normalization")

    class Config:
        frozen = True
