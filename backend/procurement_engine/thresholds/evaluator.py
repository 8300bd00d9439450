"""Executive-approval thresholds — pure functions, no I/O.

Capital works carry the higher bar and take precedence: once any category
marks a request as works, the goods/services schedule no longer applies.
"""

import math

from procurement_engine.schemas.threshold import ThresholdAlert, ThresholdType

WORKS_THRESHOLD = 5_000_000.0
GOODS_SERVICES_THRESHOLD = 3_000_000.0

WORKS_CATEGORIES = frozenset({"works", "construction", "infrastructure", "building"})
GOODS_SERVICES_CATEGORIES = frozenset({
    "goods",
    "services",
    "consulting",
    "consulting service",
    "non-consulting service",
    "supplies",
    "equipment",
})

ADMIN_ROLES = frozenset({"ADMIN", "ADMINISTRATOR", "SUPER_ADMIN"})


def coerce_amount(value) -> float:
    """Numbers pass through, numeric strings are parsed, anything else is 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.replace(",", "").strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def _format_amount(amount: float) -> str:
    if amount == int(amount):
        return f"{amount:,.0f}"
    return f"{amount:,.2f}"


def _not_required(amount: float) -> ThresholdAlert:
    return ThresholdAlert(
        is_required=False,
        message="Standard procurement workflow applies",
        level="info",
        threshold_type=ThresholdType.NONE,
        amount=amount,
        threshold=0.0,
    )


def check_executive_threshold(
    total_estimated,
    procurement_types: list[str] | None = None,
    currency: str = "JMD",
    *,
    works_threshold: float = WORKS_THRESHOLD,
    goods_services_threshold: float = GOODS_SERVICES_THRESHOLD,
) -> ThresholdAlert:
    """Decide whether a request needs Executive Director approval."""
    amount = coerce_amount(total_estimated)
    types = {(t or "").lower().strip() for t in procurement_types or []}

    if types & WORKS_CATEGORIES:
        if amount >= works_threshold:
            return ThresholdAlert(
                is_required=True,
                message=(
                    f"EXECUTIVE DIRECTOR APPROVAL REQUIRED: Works procurement "
                    f"({currency} {_format_amount(amount)}) exceeds "
                    f"{currency} {_format_amount(works_threshold)} threshold"
                ),
                level="warning",
                threshold_type=ThresholdType.WORKS,
                amount=amount,
                threshold=works_threshold,
            )
        # Works under threshold need no approval whatever else is tagged
        return _not_required(amount)

    if types & GOODS_SERVICES_CATEGORIES and amount >= goods_services_threshold:
        return ThresholdAlert(
            is_required=True,
            message=(
                f"EXECUTIVE DIRECTOR APPROVAL REQUIRED: Goods/Services procurement "
                f"({currency} {_format_amount(amount)}) exceeds "
                f"{currency} {_format_amount(goods_services_threshold)} threshold"
            ),
            level="warning",
            threshold_type=ThresholdType.GOODS_SERVICES,
            amount=amount,
            threshold=goods_services_threshold,
        )

    return _not_required(amount)


def should_show_threshold_notification(user_roles: list[str | None] | None = None) -> bool:
    """Whether a user belongs to the audience for threshold notifications."""
    roles = [str(role).upper() for role in user_roles or [] if role]

    if any("PROCUREMENT" in role for role in roles):
        return True
    if any(role in ADMIN_ROLES for role in roles):
        return True
    return any("MANAGER" in role for role in roles)
