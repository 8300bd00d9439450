"""Pydantic schemas for combining procurement requests into a multi-lot request."""

import enum
from datetime import datetime

from pydantic import BaseModel, Field

from procurement_engine.schemas.threshold import ThresholdAlert


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class CombinableLineItem(BaseModel):
    """A request line item. Every field may be missing in upstream data."""

    description: str | None = None
    quantity: float | None = None
    unit_cost: float | None = None
    total_cost: float | None = None


class CombinableRequest(BaseModel):
    id: str | int | None = None
    reference: str = ""
    title: str = ""
    description: str | None = None
    department: str | None = None
    requested_by: str | None = None
    items: list[CombinableLineItem] | None = Field(default_factory=list)
    total_estimated: float | None = None
    currency: str | None = None
    priority: str | None = None
    status: str | None = None
    created_at: datetime | None = None
    procurement_types: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class CombineRequestsConfig(BaseModel):
    combined_title: str
    combined_description: str = ""
    retain_original_references: bool = True
    consolidate_items: bool = True
    new_priority: Priority = Priority.MEDIUM
    target_department: str = ""
    justification: str = ""


class CombineValidationResult(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class PermissionCheckResult(BaseModel):
    can_combine: bool
    requires_approval: bool
    reasons: list[str] = Field(default_factory=list)


class ConsolidatedLineItem(BaseModel):
    description: str
    quantity: float
    unit_cost: float
    total_cost: float
    original_requests: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class CombinedRequestDraft(BaseModel):
    title: str
    description: str
    total_estimated: float
    currency: str
    priority: Priority
    department: str


class CombinePreview(BaseModel):
    combined_request: CombinedRequestDraft
    total_value: float
    item_count: int
    department_count: int
    original_references: list[str] = Field(default_factory=list)
    estimated_savings: float = 0.0


class LotAssignment(BaseModel):
    lot_number: int
    request_id: str | int | None = None
    reference: str
    title: str


class CombineSubmission(BaseModel):
    """Payload handed to the external submission pipeline."""

    reference: str
    title: str
    description: str
    total_estimated: float
    currency: str
    priority: Priority
    target_department: str
    items: list[ConsolidatedLineItem] = Field(default_factory=list)
    original_request_ids: list[str | int | None] = Field(default_factory=list)
    combination_config: CombineRequestsConfig
    requires_approval: bool = False
    lots: list[LotAssignment] = Field(default_factory=list)
    executive_threshold: ThresholdAlert


class CombinePlan(BaseModel):
    requests: list[CombinableRequest]
    config: CombineRequestsConfig
    permissions: PermissionCheckResult
    validation: CombineValidationResult
    preview: CombinePreview
    consolidated_items: list[ConsolidatedLineItem] = Field(default_factory=list)

    @property
    def can_proceed(self) -> bool:
        return self.permissions.can_combine and self.validation.is_valid

    @property
    def blocking_reasons(self) -> list[str]:
        reasons = list(self.validation.errors)
        if not self.permissions.can_combine:
            reasons.extend(self.permissions.reasons)
        return reasons
