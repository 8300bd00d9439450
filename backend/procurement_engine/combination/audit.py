"""Audit record for a completed combination. Construction only; storage is the caller's job."""

from datetime import datetime, timezone

from procurement_engine.combination.totals import combined_total, item_count, request_total
from procurement_engine.schemas.audit import AuditRecord
from procurement_engine.schemas.combination import CombinableRequest, CombineRequestsConfig

REQUESTS_COMBINED = "REQUESTS_COMBINED"


def generate_combine_audit_trail(
    requests: list[CombinableRequest],
    config: CombineRequestsConfig,
    actor_id,
    actor_name: str,
    *,
    combined_reference: str | None = None,
    now: datetime | None = None,
) -> AuditRecord:
    now = now or datetime.now(timezone.utc)

    details = {
        "combined_by": {"id": actor_id, "name": actor_name},
        "original_requests": [
            {
                "id": req.id,
                "reference": req.reference,
                "title": req.title,
                "total_estimated": request_total(req),
            }
            for req in requests
        ],
        "combination_config": config.model_dump(mode="json"),
        "total_value": combined_total(requests),
        "item_count": item_count(requests),
    }
    if combined_reference:
        details["combined_reference"] = combined_reference

    return AuditRecord(action=REQUESTS_COMBINED, details=details, timestamp=now.isoformat())
