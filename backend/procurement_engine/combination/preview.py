"""Preview, summary and submission payload for a would-be combined request."""

from datetime import datetime, timezone

from procurement_engine.combination.consolidator import consolidate_items, flatten_items
from procurement_engine.combination.totals import (
    combined_total,
    distinct_departments,
    item_count,
    request_total,
)
from procurement_engine.schemas.combination import (
    CombinableRequest,
    CombinedRequestDraft,
    CombinePreview,
    CombineRequestsConfig,
    CombineSubmission,
    LotAssignment,
)
from procurement_engine.thresholds.evaluator import check_executive_threshold

BULK_DISCOUNT_RATE = 0.05
BULK_DISCOUNT_MIN_REQUESTS = 3


def estimate_savings(
    total_value: float,
    request_count: int,
    *,
    rate: float = BULK_DISCOUNT_RATE,
    min_requests: int = BULK_DISCOUNT_MIN_REQUESTS,
) -> float:
    """Rough bulk-purchase discount. Zero below the minimum request count."""
    if request_count < min_requests:
        return 0.0
    return round(total_value * rate, 2)


def combined_description(requests: list[CombinableRequest], config: CombineRequestsConfig) -> str:
    references = ", ".join(req.reference for req in requests)
    return (
        f"{config.combined_description}\n\n"
        f"Original Requests: {references}\n\n"
        f"Justification: {config.justification}"
    )


def generate_combine_preview(
    requests: list[CombinableRequest],
    config: CombineRequestsConfig,
    *,
    default_currency: str = "USD",
    bulk_discount_rate: float = BULK_DISCOUNT_RATE,
    bulk_discount_min_requests: int = BULK_DISCOUNT_MIN_REQUESTS,
) -> CombinePreview:
    total_value = combined_total(requests)
    currency = (requests[0].currency if requests else None) or default_currency

    return CombinePreview(
        combined_request=CombinedRequestDraft(
            title=config.combined_title,
            description=combined_description(requests, config),
            total_estimated=total_value,
            currency=currency,
            priority=config.new_priority,
            department=config.target_department,
        ),
        total_value=total_value,
        item_count=item_count(requests),
        department_count=len(distinct_departments(requests)),
        original_references=[req.reference for req in requests],
        estimated_savings=estimate_savings(
            total_value,
            len(requests),
            rate=bulk_discount_rate,
            min_requests=bulk_discount_min_requests,
        ),
    )


def format_combine_summary(requests: list[CombinableRequest], preview: CombinePreview) -> str:
    departments = preview.department_count
    lines = [
        "REQUEST COMBINATION SUMMARY",
        "",
        f"- Combining {len(requests)} requests",
        f"- Total Value: {preview.total_value:,.2f}",
        f"- {preview.item_count} items across {departments} department{'s' if departments != 1 else ''}",
    ]
    if preview.estimated_savings > 0:
        lines.append(f"- Estimated Savings: {preview.estimated_savings:,.2f}")

    lines.extend(["", "Original Requests:"])
    for req in requests:
        lines.append(f"  - {req.reference}: {req.title} ({request_total(req):,.2f})")

    return "\n".join(lines)


def build_lots(requests: list[CombinableRequest]) -> list[LotAssignment]:
    """Number the original requests as lots of the combined request."""
    return [
        LotAssignment(
            lot_number=number,
            request_id=req.id,
            reference=req.reference,
            title=f"LOT-{number}: {req.title}",
        )
        for number, req in enumerate(requests, start=1)
    ]


def build_combine_submission(
    requests: list[CombinableRequest],
    config: CombineRequestsConfig,
    *,
    requires_approval: bool,
    now: datetime | None = None,
    default_currency: str = "USD",
    threshold_currency: str = "JMD",
    works_threshold: float = 5_000_000.0,
    goods_services_threshold: float = 3_000_000.0,
) -> CombineSubmission:
    """Assemble the payload the submission pipeline persists.

    Does not check permissions or validity; callers run those first.
    """
    now = now or datetime.now(timezone.utc)
    total_value = combined_total(requests)

    if config.retain_original_references:
        description = combined_description(requests, config)
    else:
        description = f"{config.combined_description}\n\nJustification: {config.justification}"

    items = consolidate_items(requests) if config.consolidate_items else flatten_items(requests)
    procurement_types = list(dict.fromkeys(t for req in requests for t in req.procurement_types))

    return CombineSubmission(
        reference=f"CMB-{now:%Y%m%d%H%M%S}",
        title=config.combined_title,
        description=description,
        total_estimated=total_value,
        currency=(requests[0].currency if requests else None) or default_currency,
        priority=config.new_priority,
        target_department=config.target_department,
        items=items,
        original_request_ids=[req.id for req in requests],
        combination_config=config,
        requires_approval=requires_approval,
        lots=build_lots(requests),
        executive_threshold=check_executive_threshold(
            total_value,
            procurement_types,
            threshold_currency,
            works_threshold=works_threshold,
            goods_services_threshold=goods_services_threshold,
        ),
    )
