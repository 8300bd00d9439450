"""Who may combine requests, and when a combination needs extra approval."""

import enum
import re

from procurement_engine.combination.totals import combined_total, distinct_departments
from procurement_engine.schemas.combination import CombinableRequest, PermissionCheckResult


class RoleCategory(str, enum.Enum):
    PROCUREMENT_OFFICER = "procurement_officer"
    PROCUREMENT_MANAGER = "procurement_manager"
    ADMINISTRATOR = "administrator"


COMBINE_ROLES = frozenset(RoleCategory)

_ADMIN_NAMES = frozenset({"ADMIN", "ADMINISTRATOR", "SUPER ADMIN"})
_SEPARATORS = re.compile(r"[\s_\-]+")


def normalize_role(role: str | None) -> RoleCategory | None:
    """Map a raw role name onto a recognized category.

    Case, underscores, hyphens and repeated spaces are ignored, so
    "procurement_officer", "Procurement Officer" and "PROCUREMENT-OFFICER"
    all resolve to the same category.
    """
    if not role:
        return None
    name = _SEPARATORS.sub(" ", str(role)).strip().upper()

    if name in _ADMIN_NAMES:
        return RoleCategory.ADMINISTRATOR
    if "PROCUREMENT" in name:
        if "MANAGER" in name:
            return RoleCategory.PROCUREMENT_MANAGER
        if "OFFICER" in name or name == "PROCUREMENT":
            return RoleCategory.PROCUREMENT_OFFICER
    return None


def normalize_roles(roles: list[str | None] | None) -> set[RoleCategory]:
    return {category for category in map(normalize_role, roles or []) if category}


def check_combine_permissions(
    user_roles: list[str | None] | None,
    user_department: str | None,
    requests: list[CombinableRequest],
    *,
    approval_threshold: float = 25_000.0,
) -> PermissionCheckResult:
    """Decide whether the actor may combine `requests` and whether approval is needed.

    `user_department` is accepted for callers that scope by department; the
    cross-department trigger is driven by the request set itself.
    """
    reasons: list[str] = []
    requires_approval = False

    can_combine = bool(normalize_roles(user_roles) & COMBINE_ROLES)
    if not can_combine:
        reasons.append(
            "Only procurement officers, procurement managers, and administrators can combine requests"
        )

    departments = distinct_departments(requests)
    if len(departments) > 1:
        requires_approval = True
        reasons.append("Cross-department combinations require additional approval")

    if combined_total(requests) > approval_threshold:
        requires_approval = True
        reasons.append(
            f"High-value combinations (>{approval_threshold:,.0f}) require additional approval"
        )

    if not can_combine:
        reasons.append("Insufficient permission: user does not have permission to combine requests")

    return PermissionCheckResult(
        can_combine=can_combine,
        requires_approval=requires_approval,
        reasons=reasons,
    )
