"""Merge line items that share a description across several requests."""

from dataclasses import dataclass, field

from procurement_engine.combination.totals import request_items
from procurement_engine.schemas.combination import (
    CombinableLineItem,
    CombinableRequest,
    ConsolidatedLineItem,
)


@dataclass
class _RunningLine:
    description: str
    quantity: float
    unit_cost: float
    total_cost: float
    original_requests: list[str] = field(default_factory=list)

    def add(self, quantity: float, total_cost: float, reference: str) -> None:
        self.quantity += quantity
        self.total_cost += total_cost
        self.original_requests.append(reference)
        # Weighted average keeps quantity * unit_cost equal to the summed totals
        if self.quantity:
            self.unit_cost = self.total_cost / self.quantity

    def freeze(self) -> ConsolidatedLineItem:
        return ConsolidatedLineItem(
            description=self.description,
            quantity=self.quantity,
            unit_cost=self.unit_cost,
            total_cost=self.total_cost,
            original_requests=list(self.original_requests),
        )


def is_well_formed(item: CombinableLineItem) -> bool:
    return bool(item.description and item.description.strip()) and (
        item.quantity is not None and item.unit_cost is not None
    )


def line_total(item: CombinableLineItem) -> float:
    if item.total_cost is not None:
        return item.total_cost
    return item.quantity * item.unit_cost


def consolidate_items(requests: list[CombinableRequest]) -> list[ConsolidatedLineItem]:
    """Collapse items with the same (case-insensitive) description into one line.

    Items missing a description, quantity or unit cost are skipped. Output
    follows the order in which each description first appears.
    """
    lines: dict[str, _RunningLine] = {}

    for request in requests:
        for item in request_items(request):
            if not is_well_formed(item):
                continue

            key = item.description.lower().strip()
            total = line_total(item)

            if key in lines:
                lines[key].add(item.quantity, total, request.reference)
            else:
                lines[key] = _RunningLine(
                    description=item.description,
                    quantity=item.quantity,
                    unit_cost=item.unit_cost,
                    total_cost=total,
                    original_requests=[request.reference],
                )

    return [line.freeze() for line in lines.values()]


def flatten_items(requests: list[CombinableRequest]) -> list[ConsolidatedLineItem]:
    """Every well-formed item as its own line, for combinations that skip consolidation."""
    return [
        ConsolidatedLineItem(
            description=item.description,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
            total_cost=line_total(item),
            original_requests=[request.reference],
        )
        for request in requests
        for item in request_items(request)
        if is_well_formed(item)
    ]
