"""Validation of a request selection before it is combined.

Three tiers of findings:
- errors block the combination outright,
- warnings flag risk but let the user proceed,
- recommendations are advisory.
"""

from procurement_engine.combination.totals import combined_total, request_items
from procurement_engine.schemas.combination import CombinableRequest, CombineValidationResult, Priority

MIN_REQUESTS = 2
INELIGIBLE_STATUSES = frozenset({"CLOSED", "REJECTED", "SENT_TO_VENDOR"})


def _distinct(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def description_uniqueness_ratio(requests: list[CombinableRequest]) -> float:
    """Distinct item descriptions over total item descriptions. 1.0 when there are none."""
    descriptions = [
        (item.description or "").lower().strip()
        for req in requests
        for item in request_items(req)
    ]
    descriptions = [d for d in descriptions if d]
    if not descriptions:
        return 1.0
    return len(set(descriptions)) / len(descriptions)


def validate_request_combination(
    requests: list[CombinableRequest],
    *,
    default_currency: str = "USD",
    max_requests_warning: int = 10,
    special_procedures_threshold: float = 50_000.0,
    uniqueness_ratio_threshold: float = 0.7,
) -> CombineValidationResult:
    errors: list[str] = []
    warnings: list[str] = []
    recommendations: list[str] = []

    if len(requests) < MIN_REQUESTS:
        errors.append(f"At least {MIN_REQUESTS} requests must be selected for combination")
        return CombineValidationResult(is_valid=False, errors=errors)

    if len(requests) > max_requests_warning:
        warnings.append(f"Combining more than {max_requests_warning} requests may be complex to manage")

    ineligible = [req for req in requests if (req.status or "").upper().strip() in INELIGIBLE_STATUSES]
    if ineligible:
        references = ", ".join(req.reference or str(req.id) for req in ineligible)
        errors.append(
            "Cannot combine requests that are closed, rejected, or already sent to vendor "
            f"({references})"
        )

    currencies = _distinct([(req.currency or default_currency).upper() for req in requests])
    if len(currencies) > 1:
        warnings.append(
            f"Multiple currencies detected: {', '.join(currencies)}. Consider currency conversion."
        )

    departments = _distinct([(req.department or "").strip() or "Unknown" for req in requests])
    if len(departments) > 1:
        warnings.append(
            f"Requests from {len(departments)} different departments. Ensure proper authorization."
        )
        recommendations.append("Consider cross-departmental approval process")

    priorities = {(req.priority or Priority.MEDIUM.value).upper() for req in requests}
    if Priority.URGENT.value in priorities and Priority.LOW.value in priorities:
        warnings.append("Mixing urgent and low priority requests may delay urgent items")
        recommendations.append("Consider keeping urgent requests separate")

    if combined_total(requests) > special_procedures_threshold:
        recommendations.append(
            f"Combined request exceeds {special_procedures_threshold:,.0f} threshold - "
            "special procurement procedures may apply"
        )

    if description_uniqueness_ratio(requests) < uniqueness_ratio_threshold:
        recommendations.append("Many similar items detected - consider consolidating quantities")

    return CombineValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        recommendations=recommendations,
    )
