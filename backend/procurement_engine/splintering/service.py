"""SplinteringService — runs the splintering rules for a request being submitted.

Loads the active rules from the rule repository, fetches the widest history
window those rules need from the request repository, and hands the snapshot
to the pure detectors.
"""

import logging
from datetime import datetime, timezone

from procurement_engine.config import Settings
from procurement_engine.repositories import RequestRepository, RuleRepository
from procurement_engine.schemas.splintering import (
    ProcurementRequestSnapshot,
    SplinteringCheckResult,
    SplinteringStats,
)
from procurement_engine.splintering.detectors import (
    cutoff_date,
    detect_splintering,
    get_splintering_recommendations,
    summarize_request_activity,
)
from procurement_engine.splintering.rules import active_rules

logger = logging.getLogger("procurement.splintering.service")


class SplinteringService:
    """Orchestrates splintering detection against injected repositories."""

    def __init__(
        self,
        settings: Settings,
        rule_repository: RuleRepository,
        request_repository: RequestRepository,
    ):
        self.rules = rule_repository
        self.requests = request_repository
        self.similarity_cutoff = settings.description_similarity_cutoff
        self.currency = settings.threshold_currency
        self.activity_window_days = settings.activity_window_days

    async def check(
        self,
        current: ProcurementRequestSnapshot,
        now: datetime | None = None,
    ) -> SplinteringCheckResult:
        """Evaluate `current` against recent history. Returns alerts and a blocked flag."""
        now = now or datetime.now(timezone.utc)
        rules = active_rules(await self.rules.list_rules())
        if not rules:
            logger.info("No enabled splintering rules, skipping check for request %s", current.id)
            return SplinteringCheckResult()

        # One fetch covers every rule; each rule narrows to its own window
        widest_window = max(rule.time_window_days for rule in rules)
        history = await self.requests.list_recent_requests(cutoff_date(now, widest_window))

        alerts = await detect_splintering(
            current,
            history,
            rules,
            now=now,
            similarity_cutoff=self.similarity_cutoff,
            currency=self.currency,
        )
        blocked = any(alert.block_submission for alert in alerts)

        if alerts:
            logger.warning(
                "Splintering check for request %s raised %d alert(s) (blocked=%s): %s",
                current.id,
                len(alerts),
                blocked,
                ", ".join(f"{a.type.value}/{a.severity.value}" for a in alerts),
            )
        else:
            logger.info(
                "Splintering check for request %s passed (%d rules, %d historical requests)",
                current.id,
                len(rules),
                len(history),
            )

        return SplinteringCheckResult(
            alerts=alerts,
            blocked=blocked,
            recommendations=get_splintering_recommendations(alerts),
        )

    async def activity_stats(
        self,
        time_frame_days: int | None = None,
        now: datetime | None = None,
    ) -> SplinteringStats:
        """Frequency scan of recent requests for the admin dashboard."""
        now = now or datetime.now(timezone.utc)
        days = time_frame_days or self.activity_window_days
        history = await self.requests.list_recent_requests(cutoff_date(now, days))
        stats = summarize_request_activity(history, days, now)
        logger.info(
            "Activity scan over %d days: %d requests, %d busy vendors, %d busy departments",
            days,
            stats.total_requests,
            len(stats.high_frequency_vendors),
            len(stats.high_frequency_departments),
        )
        return stats
