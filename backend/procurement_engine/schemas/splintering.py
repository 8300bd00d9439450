"""Pydantic schemas for splintering rules, request snapshots and alerts."""

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class RuleStrategy(str, enum.Enum):
    """How a rule selects historical requests related to the current one."""

    VENDOR = "vendor"
    CATEGORY = "category"
    DEPARTMENT = "department"
    DESCRIPTION = "description"


class AlertType(str, enum.Enum):
    VENDOR_SPLINTERING = "VENDOR_SPLINTERING"
    CATEGORY_SPLINTERING = "CATEGORY_SPLINTERING"
    DEPARTMENT_SPLINTERING = "DEPARTMENT_SPLINTERING"
    DESCRIPTION_SIMILARITY = "DESCRIPTION_SIMILARITY"


class AlertSeverity(str, enum.Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class SplinteringRule(BaseModel):
    id: str
    name: str
    description: str = ""
    threshold_amount: float = Field(..., ge=0)
    time_window_days: int = Field(..., gt=0)
    enabled: bool = True
    strategy: RuleStrategy

    model_config = {"frozen": True}


class ProcurementRequestSnapshot(BaseModel):
    """Minimal read-only projection of a request used for splintering checks."""

    id: str | int | None = None
    vendor_name: str | None = None
    category: str | None = None
    department: str | None = None
    description: str | None = None
    estimated_cost: float | None = None
    requested_date: datetime | None = None
    requested_by: str | None = None

    model_config = {"frozen": True}


class RelatedRequest(BaseModel):
    id: str | int | None = None
    description: str | None = None
    amount: float | None = None
    date: datetime | None = None
    vendor: str | None = None


class AlertDetails(BaseModel):
    total_amount: float
    request_count: int
    time_span: str
    threshold: float
    exceeds_by: float
    related_requests: list[RelatedRequest] = Field(default_factory=list)


class SplinteringAlert(BaseModel):
    id: str
    type: AlertType
    severity: AlertSeverity
    message: str
    details: AlertDetails
    block_submission: bool


class FormattedAlert(BaseModel):
    title: str
    message: str
    details: str
    actions: list[str]


class SplinteringCheckResult(BaseModel):
    alerts: list[SplinteringAlert] = Field(default_factory=list)
    blocked: bool = False
    recommendations: list[str] = Field(default_factory=list)


class ActivityGroup(BaseModel):
    key: str
    request_count: int
    total_value: float


class SplinteringStats(BaseModel):
    total_requests: int = 0
    time_frame: str
    high_frequency_vendors: list[ActivityGroup] = Field(default_factory=list)
    high_frequency_departments: list[ActivityGroup] = Field(default_factory=list)
    high_frequency_requesters: list[ActivityGroup] = Field(default_factory=list)
