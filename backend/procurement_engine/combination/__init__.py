from procurement_engine.combination.audit import generate_combine_audit_trail
from procurement_engine.combination.consolidator import consolidate_items
from procurement_engine.combination.permissions import (
    RoleCategory,
    check_combine_permissions,
    normalize_roles,
)
from procurement_engine.combination.preview import (
    build_combine_submission,
    format_combine_summary,
    generate_combine_preview,
)
from procurement_engine.combination.validator import validate_request_combination

__all__ = [
    "RoleCategory",
    "build_combine_submission",
    "check_combine_permissions",
    "consolidate_items",
    "format_combine_summary",
    "generate_combine_audit_trail",
    "generate_combine_preview",
    "normalize_roles",
    "validate_request_combination",
]
