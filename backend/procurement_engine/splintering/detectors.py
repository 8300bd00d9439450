"""Pure splintering detection functions — no repository or I/O dependency.

A request is "splintered" when a purchase that should have gone through a
single competitive process is split into several smaller requests that each
stay under an approval threshold. Each rule looks back over a time window for
requests related to the current one and flags the group when their combined
value crosses the rule's threshold.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone

from procurement_engine.schemas.splintering import (
    ActivityGroup,
    AlertDetails,
    AlertSeverity,
    FormattedAlert,
    ProcurementRequestSnapshot,
    RelatedRequest,
    RuleStrategy,
    SplinteringAlert,
    SplinteringRule,
    SplinteringStats,
)
from procurement_engine.splintering.rules import ALERT_TYPE_BY_STRATEGY, DEFAULT_RULES
from procurement_engine.splintering.similarity import similarity

# Fractions of the rule threshold by which the combined total exceeds it
SEVERITY_HIGH_EXCESS = 0.5
SEVERITY_MEDIUM_EXCESS = 0.2
BLOCK_SUBMISSION_EXCESS = 0.3

DEFAULT_SIMILARITY_CUTOFF = 70

# Minimum request counts for the activity scan
ACTIVITY_MIN_VENDOR_REQUESTS = 3
ACTIVITY_MIN_DEPARTMENT_REQUESTS = 5
ACTIVITY_MIN_REQUESTER_REQUESTS = 4


def _norm(value: str | None) -> str:
    return (value or "").lower().strip()


def _as_utc(value: datetime | None, default: datetime) -> datetime:
    if value is None:
        return default
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _resolve_now(now: datetime | None) -> datetime:
    return _as_utc(now, datetime.now(timezone.utc))


def _amount(value: float | None) -> float:
    return float(value or 0)


def format_money(amount: float, currency: str) -> str:
    return f"{currency} {amount:,.2f}"


def cutoff_date(now: datetime, time_window_days: int) -> datetime:
    """Earliest requested date that still falls inside a rule's window."""
    return now - timedelta(days=time_window_days)


def requests_in_window(
    requests: list[ProcurementRequestSnapshot],
    time_window_days: int,
    now: datetime,
) -> list[ProcurementRequestSnapshot]:
    """Keep requests dated on or after the cutoff. Undated requests count as now."""
    now = _as_utc(now, now)
    cutoff = cutoff_date(now, time_window_days)
    return [req for req in requests if _as_utc(req.requested_date, now) >= cutoff]


def select_related_requests(
    current: ProcurementRequestSnapshot,
    candidates: list[ProcurementRequestSnapshot],
    strategy: RuleStrategy,
    similarity_cutoff: int = DEFAULT_SIMILARITY_CUTOFF,
) -> list[ProcurementRequestSnapshot]:
    """Pick the candidates a rule considers part of the same purchase as `current`."""
    candidates = [
        req for req in candidates
        if current.id is None or req.id is None or req.id != current.id
    ]

    def similar_description(req: ProcurementRequestSnapshot) -> bool:
        if not current.description or not req.description:
            return False
        return similarity(current.description, req.description) > similarity_cutoff

    if strategy == RuleStrategy.VENDOR:
        key = _norm(current.vendor_name)
        if not key:
            return []
        return [req for req in candidates if _norm(req.vendor_name) == key]

    if strategy == RuleStrategy.CATEGORY:
        key = _norm(current.category)
        if not key:
            return []
        return [req for req in candidates if _norm(req.category) == key]

    if strategy == RuleStrategy.DEPARTMENT:
        # Department alone is too broad; the purchased items must also look alike
        key = _norm(current.department)
        if not key:
            return []
        return [
            req for req in candidates
            if _norm(req.department) == key and similar_description(req)
        ]

    if strategy == RuleStrategy.DESCRIPTION:
        return [req for req in candidates if similar_description(req)]

    return []


def classify_severity(exceeds_by: float, threshold: float) -> AlertSeverity:
    if exceeds_by > threshold * SEVERITY_HIGH_EXCESS:
        return AlertSeverity.HIGH
    if exceeds_by > threshold * SEVERITY_MEDIUM_EXCESS:
        return AlertSeverity.MEDIUM
    return AlertSeverity.LOW


def should_block_submission(severity: AlertSeverity, exceeds_by: float, threshold: float) -> bool:
    """HIGH alerts always block; the raw excess check can also block a MEDIUM alert."""
    return severity == AlertSeverity.HIGH or exceeds_by > threshold * BLOCK_SUBMISSION_EXCESS


def build_alert_message(
    rule: SplinteringRule,
    total_amount: float,
    request_count: int,
    current: ProcurementRequestSnapshot,
    currency: str = "JMD",
) -> str:
    amount = format_money(total_amount, currency)
    threshold = format_money(rule.threshold_amount, currency)
    days = rule.time_window_days

    if rule.strategy == RuleStrategy.VENDOR:
        return (
            f"POTENTIAL SPLINTERING DETECTED: {request_count} requests to vendor "
            f"\"{current.vendor_name}\" totaling {amount} in {days} days exceeds the {threshold} "
            "threshold. This may constitute procurement splintering to avoid competitive "
            "bidding requirements."
        )
    if rule.strategy == RuleStrategy.CATEGORY:
        return (
            f"POTENTIAL SPLINTERING DETECTED: {request_count} requests in category "
            f"\"{current.category}\" totaling {amount} in {days} days exceeds the {threshold} "
            "threshold. Consider consolidating these purchases for better value and compliance."
        )
    if rule.strategy == RuleStrategy.DEPARTMENT:
        return (
            f"POTENTIAL SPLINTERING DETECTED: {request_count} similar requests from department "
            f"\"{current.department}\" totaling {amount} in {days} days exceeds the {threshold} "
            "threshold. These purchases should be consolidated into a single procurement process."
        )
    return (
        f"POTENTIAL SPLINTERING DETECTED: {request_count} related requests totaling {amount} "
        f"exceed the {threshold} threshold."
    )


def evaluate_rule(
    current: ProcurementRequestSnapshot,
    historical: list[ProcurementRequestSnapshot],
    rule: SplinteringRule,
    *,
    now: datetime,
    similarity_cutoff: int = DEFAULT_SIMILARITY_CUTOFF,
    currency: str = "JMD",
) -> SplinteringAlert | None:
    """Evaluate one rule. Returns an alert if the rule fires, None otherwise."""
    recent = requests_in_window(historical, rule.time_window_days, now)
    related = select_related_requests(current, recent, rule.strategy, similarity_cutoff)

    total_amount = _amount(current.estimated_cost) + sum(_amount(req.estimated_cost) for req in related)

    if not related or total_amount <= rule.threshold_amount:
        return None

    exceeds_by = total_amount - rule.threshold_amount
    severity = classify_severity(exceeds_by, rule.threshold_amount)
    request_count = len(related) + 1

    return SplinteringAlert(
        id=f"{rule.id}-{int(now.timestamp() * 1000)}",
        type=ALERT_TYPE_BY_STRATEGY[rule.strategy],
        severity=severity,
        message=build_alert_message(rule, total_amount, request_count, current, currency),
        details=AlertDetails(
            total_amount=total_amount,
            request_count=request_count,
            time_span=f"{rule.time_window_days} days",
            threshold=rule.threshold_amount,
            exceeds_by=exceeds_by,
            related_requests=[
                RelatedRequest(
                    id=req.id,
                    description=req.description,
                    amount=req.estimated_cost,
                    date=req.requested_date,
                    vendor=req.vendor_name,
                )
                for req in related
            ],
        ),
        block_submission=should_block_submission(severity, exceeds_by, rule.threshold_amount),
    )


async def detect_splintering(
    current: ProcurementRequestSnapshot,
    historical: list[ProcurementRequestSnapshot],
    rules: list[SplinteringRule] | None = None,
    *,
    now: datetime | None = None,
    similarity_cutoff: int = DEFAULT_SIMILARITY_CUTOFF,
    currency: str = "JMD",
) -> list[SplinteringAlert]:
    """Run every enabled rule against the current request and its history.

    The historical window must be fully materialized by the caller. Rules are
    evaluated independently, so one request may raise several alerts.
    """
    now = _resolve_now(now)
    alerts: list[SplinteringAlert] = []

    for rule in DEFAULT_RULES if rules is None else rules:
        if not rule.enabled:
            continue
        alert = evaluate_rule(
            current,
            historical,
            rule,
            now=now,
            similarity_cutoff=similarity_cutoff,
            currency=currency,
        )
        if alert:
            alerts.append(alert)

    return alerts


def get_splintering_recommendations(alerts: list[SplinteringAlert]) -> list[str]:
    if not alerts:
        return []

    recommendations = [
        "RECOMMENDATIONS TO ADDRESS SPLINTERING:",
        "Consolidate related purchases into a single procurement process",
        "Conduct competitive bidding for combined requirements",
        "Coordinate with other departments for bulk purchasing opportunities",
        "Develop annual procurement plans to avoid fragmented purchasing",
        "Consult with Procurement Office for guidance on proper procedures",
    ]

    if any(alert.severity == AlertSeverity.HIGH for alert in alerts):
        recommendations.extend([
            "HIGH PRIORITY ACTIONS REQUIRED:",
            "Obtain written justification for purchase separation",
            "Secure approval from Chief Procurement Officer",
            "Document legitimate business reasons for splitting",
            "Consider market research to demonstrate value for money",
        ])

    return recommendations


def format_splintering_alert(alert: SplinteringAlert, currency: str = "JMD") -> FormattedAlert:
    details = alert.details
    detail_lines = [
        f"Total Amount: {format_money(details.total_amount, currency)}",
        f"Request Count: {details.request_count}",
        f"Time Period: {details.time_span}",
        f"Exceeds Threshold By: {format_money(details.exceeds_by, currency)}",
    ]

    if alert.block_submission:
        actions = ["Contact Procurement Office", "Provide Justification", "Consolidate Requests"]
    else:
        actions = ["Review for Consolidation", "Continue with Caution", "Document Decision"]

    return FormattedAlert(
        title=f"{alert.severity.value} Risk Splintering Alert",
        message=alert.message,
        details="\n".join(detail_lines),
        actions=actions,
    )


def summarize_request_activity(
    requests: list[ProcurementRequestSnapshot],
    time_frame_days: int = 30,
    now: datetime | None = None,
) -> SplinteringStats:
    """Frequency scan for an admin dashboard.

    Groups recent requests by vendor, department and requester and reports the
    groups busy enough to deserve a closer look.
    """
    now = _resolve_now(now)
    recent = requests_in_window(requests, time_frame_days, now)

    by_vendor: dict[str, list[ProcurementRequestSnapshot]] = defaultdict(list)
    by_department: dict[str, list[ProcurementRequestSnapshot]] = defaultdict(list)
    by_requester: dict[str, list[ProcurementRequestSnapshot]] = defaultdict(list)

    for req in recent:
        by_vendor[(req.vendor_name or "unknown").strip()].append(req)
        by_department[(req.department or "unknown").strip()].append(req)
        by_requester[(req.requested_by or "unknown").strip()].append(req)

    def busy(groups: dict[str, list[ProcurementRequestSnapshot]], minimum: int) -> list[ActivityGroup]:
        return [
            ActivityGroup(
                key=key,
                request_count=len(members),
                total_value=sum(_amount(m.estimated_cost) for m in members),
            )
            for key, members in groups.items()
            if len(members) >= minimum
        ]

    return SplinteringStats(
        total_requests=len(recent),
        time_frame=f"{time_frame_days} days",
        high_frequency_vendors=busy(by_vendor, ACTIVITY_MIN_VENDOR_REQUESTS),
        high_frequency_departments=busy(by_department, ACTIVITY_MIN_DEPARTMENT_REQUESTS),
        high_frequency_requesters=busy(by_requester, ACTIVITY_MIN_REQUESTER_REQUESTS),
    )
