from datetime import datetime, timedelta, timezone

import pytest

from procurement_engine.config import Settings
from procurement_engine.schemas.combination import (
    CombinableLineItem,
    CombinableRequest,
    CombineRequestsConfig,
)
from procurement_engine.schemas.splintering import ProcurementRequestSnapshot

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> Settings:
    # Ignore any local .env so tests see the documented defaults
    return Settings(_env_file=None)


def days_ago(days: int) -> datetime:
    return NOW - timedelta(days=days)


def make_snapshot(
    id,
    *,
    vendor: str | None = None,
    category: str | None = None,
    department: str | None = None,
    description: str | None = None,
    cost: float | None = None,
    age_days: int | None = 10,
    requested_by: str | None = None,
) -> ProcurementRequestSnapshot:
    return ProcurementRequestSnapshot(
        id=id,
        vendor_name=vendor,
        category=category,
        department=department,
        description=description,
        estimated_cost=cost,
        requested_date=days_ago(age_days) if age_days is not None else None,
        requested_by=requested_by,
    )


def make_request(
    id,
    *,
    reference: str | None = None,
    title: str | None = None,
    department: str | None = "Finance",
    total: float | None = 1000.0,
    status: str | None = "SUBMITTED",
    priority: str | None = "MEDIUM",
    currency: str | None = "USD",
    items: list[dict] | None = None,
    procurement_types: list[str] | None = None,
) -> CombinableRequest:
    return CombinableRequest(
        id=id,
        reference=reference or f"REQ-{id:03d}",
        title=title or f"Request {id}",
        department=department,
        requested_by="Jordan Reid",
        items=[CombinableLineItem(**item) for item in items or []],
        total_estimated=total,
        currency=currency,
        priority=priority,
        status=status,
        created_at=days_ago(5),
        procurement_types=procurement_types or [],
    )


@pytest.fixture
def combine_config() -> CombineRequestsConfig:
    return CombineRequestsConfig(
        combined_title="Consolidated office supplies",
        combined_description="Quarterly office supplies for all units",
        justification="Bulk purchase for better pricing",
        target_department="Procurement",
    )
