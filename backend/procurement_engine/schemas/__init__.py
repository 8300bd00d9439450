from procurement_engine.schemas.audit import AuditRecord
from procurement_engine.schemas.combination import (
    CombinableLineItem,
    CombinableRequest,
    CombinePlan,
    CombinePreview,
    CombineRequestsConfig,
    CombineSubmission,
    CombineValidationResult,
    ConsolidatedLineItem,
    PermissionCheckResult,
    Priority,
)
from procurement_engine.schemas.splintering import (
    AlertSeverity,
    AlertType,
    ProcurementRequestSnapshot,
    RuleStrategy,
    SplinteringAlert,
    SplinteringRule,
)
from procurement_engine.schemas.threshold import ThresholdAlert, ThresholdType

__all__ = [
    "AlertSeverity",
    "AlertType",
    "AuditRecord",
    "CombinableLineItem",
    "CombinableRequest",
    "CombinePlan",
    "CombinePreview",
    "CombineRequestsConfig",
    "CombineSubmission",
    "CombineValidationResult",
    "ConsolidatedLineItem",
    "PermissionCheckResult",
    "Priority",
    "ProcurementRequestSnapshot",
    "RuleStrategy",
    "SplinteringAlert",
    "SplinteringRule",
    "ThresholdAlert",
    "ThresholdType",
]
