"""Repository interfaces the engine reads rules and requests through.

The engine never owns storage. Production callers wrap their database or API
client in these protocols; the in-memory implementations serve tests and
embedding.
"""

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from procurement_engine.config import Settings
from procurement_engine.exceptions import RequestNotFoundError
from procurement_engine.schemas.combination import CombinableRequest
from procurement_engine.schemas.splintering import ProcurementRequestSnapshot, SplinteringRule
from procurement_engine.splintering.rules import build_default_rules


@runtime_checkable
class RuleRepository(Protocol):
    """Source of the active splintering rule set."""

    async def list_rules(self) -> list[SplinteringRule]:
        ...


@runtime_checkable
class RequestRepository(Protocol):
    """Source of request snapshots and combinable requests."""

    async def list_recent_requests(self, since: datetime) -> list[ProcurementRequestSnapshot]:
        """Return snapshots requested on or after `since` (undated ones included)."""
        ...

    async def get_combinable_requests(self, request_ids: list) -> list[CombinableRequest]:
        """Return requests for `request_ids` in the given order.

        Raises:
            RequestNotFoundError: When any id is unknown.
        """
        ...


class InMemoryRuleRepository:
    """Rule store backed by a list. Falls back to the default rules when none are given."""

    def __init__(self, settings: Settings, rules: list[SplinteringRule] | None = None):
        self._rules = list(rules) if rules is not None else build_default_rules(settings)

    async def list_rules(self) -> list[SplinteringRule]:
        return list(self._rules)

    def replace_rule(self, rule: SplinteringRule) -> None:
        """Administrative update of a single rule, matched by id."""
        self._rules = [rule if existing.id == rule.id else existing for existing in self._rules]
        if not any(existing.id == rule.id for existing in self._rules):
            self._rules.append(rule)


class InMemoryRequestRepository:
    """Request store backed by lists."""

    def __init__(
        self,
        snapshots: list[ProcurementRequestSnapshot] | None = None,
        combinable: list[CombinableRequest] | None = None,
    ):
        self._snapshots = list(snapshots or [])
        self._combinable = {req.id: req for req in combinable or []}

    async def list_recent_requests(self, since: datetime) -> list[ProcurementRequestSnapshot]:
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        recent = []
        for snap in self._snapshots:
            requested = snap.requested_date
            if requested is None:
                recent.append(snap)
                continue
            if requested.tzinfo is None:
                requested = requested.replace(tzinfo=timezone.utc)
            if requested >= since:
                recent.append(snap)
        return recent

    async def get_combinable_requests(self, request_ids: list) -> list[CombinableRequest]:
        missing = [rid for rid in request_ids if rid not in self._combinable]
        if missing:
            raise RequestNotFoundError(missing)
        return [self._combinable[rid] for rid in request_ids]
