"""Aggregation helpers shared by the combination modules. Missing values count as 0."""

from procurement_engine.schemas.combination import CombinableLineItem, CombinableRequest


def request_total(request: CombinableRequest) -> float:
    return float(request.total_estimated or 0)


def combined_total(requests: list[CombinableRequest]) -> float:
    return sum(request_total(req) for req in requests)


def request_items(request: CombinableRequest) -> list[CombinableLineItem]:
    return list(request.items or [])


def item_count(requests: list[CombinableRequest]) -> int:
    return sum(len(request_items(req)) for req in requests)


def distinct_departments(requests: list[CombinableRequest]) -> list[str]:
    """Distinct non-empty department names, in first-seen order."""
    seen: list[str] = []
    for req in requests:
        name = (req.department or "").strip()
        if name and name not in seen:
            seen.append(name)
    return seen
