"""Tests for the pure splintering detectors."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from conftest import NOW, days_ago, make_snapshot
from procurement_engine.schemas.splintering import (
    AlertSeverity,
    AlertType,
    RuleStrategy,
    SplinteringRule,
)
from procurement_engine.splintering.detectors import (
    classify_severity,
    cutoff_date,
    detect_splintering,
    format_splintering_alert,
    get_splintering_recommendations,
    requests_in_window,
    select_related_requests,
    should_block_submission,
    summarize_request_activity,
)
from procurement_engine.splintering.rules import DEFAULT_RULES

VENDOR_RULE = DEFAULT_RULES[0]
CATEGORY_RULE = DEFAULT_RULES[1]
DEPARTMENT_RULE = DEFAULT_RULES[2]


def vendor_history(*costs, vendor="Acme Supplies", age_days=10):
    return [
        make_snapshot(f"H{i}", vendor=vendor, cost=cost, age_days=age_days)
        for i, cost in enumerate(costs)
    ]


# ── Building blocks ──


class TestCutoffAndWindow:
    def test_cutoff_date(self):
        assert cutoff_date(NOW, 90) == NOW - timedelta(days=90)

    def test_window_keeps_boundary_and_undated(self):
        requests = [
            make_snapshot("edge", age_days=90),
            make_snapshot("old", age_days=91),
            make_snapshot("undated", age_days=None),
        ]
        kept = requests_in_window(requests, 90, NOW)
        assert [r.id for r in kept] == ["edge", "undated"]

    def test_naive_dates_treated_as_utc(self):
        snap = make_snapshot("naive").model_copy(
            update={"requested_date": days_ago(5).replace(tzinfo=None)}
        )
        assert requests_in_window([snap], 30, NOW) == [snap]


class TestSeverity:
    @pytest.mark.parametrize(
        "exceeds_by,expected",
        [(5_000, AlertSeverity.LOW), (6_000, AlertSeverity.MEDIUM), (12_500, AlertSeverity.MEDIUM), (12_501, AlertSeverity.HIGH)],
    )
    def test_tiers(self, exceeds_by, expected):
        assert classify_severity(exceeds_by, 25_000) == expected

    def test_medium_can_block_on_raw_excess(self):
        # 40% excess: MEDIUM tier, but over the 30% blocking line
        assert should_block_submission(AlertSeverity.MEDIUM, 10_000, 25_000) is True
        assert should_block_submission(AlertSeverity.MEDIUM, 6_000, 25_000) is False
        assert should_block_submission(AlertSeverity.HIGH, 0, 25_000) is True


class TestSelectRelated:
    def test_vendor_match_normalized(self):
        current = make_snapshot("C", vendor="Acme Supplies")
        candidates = [
            make_snapshot("A", vendor="  ACME supplies "),
            make_snapshot("B", vendor="Other Vendor"),
        ]
        related = select_related_requests(current, candidates, RuleStrategy.VENDOR)
        assert [r.id for r in related] == ["A"]

    def test_missing_key_selects_nothing(self):
        current = make_snapshot("C")
        candidates = [make_snapshot("A", vendor="Acme")]
        assert select_related_requests(current, candidates, RuleStrategy.VENDOR) == []
        assert select_related_requests(current, candidates, RuleStrategy.CATEGORY) == []

    def test_department_requires_similar_description(self):
        current = make_snapshot("C", department="IT", description="Laptop computers for staff")
        candidates = [
            make_snapshot("A", department="it", description="Laptop computers for staf"),
            make_snapshot("B", department="IT", description="Office cleaning services"),
            make_snapshot("D", department="Finance", description="Laptop computers for staff"),
        ]
        related = select_related_requests(current, candidates, RuleStrategy.DEPARTMENT)
        assert [r.id for r in related] == ["A"]

    def test_current_request_not_counted_twice(self):
        current = make_snapshot("C", vendor="Acme")
        candidates = [make_snapshot("C", vendor="Acme"), make_snapshot("A", vendor="Acme")]
        related = select_related_requests(current, candidates, RuleStrategy.VENDOR)
        assert [r.id for r in related] == ["A"]


# ── detect_splintering ──


class TestDetectSplintering:
    @pytest.mark.asyncio
    async def test_vendor_low_severity_alert(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=10_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), now=NOW)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.type == AlertType.VENDOR_SPLINTERING
        assert alert.severity == AlertSeverity.LOW
        assert alert.block_submission is False
        assert alert.details.total_amount == 30_000
        assert alert.details.exceeds_by == 5_000
        assert alert.details.request_count == 3
        assert alert.details.threshold == 25_000
        assert alert.details.time_span == "90 days"
        assert [r.id for r in alert.details.related_requests] == ["H0", "H1"]
        assert "JMD 30,000.00" in alert.message
        assert "Acme Supplies" in alert.message

    @pytest.mark.asyncio
    async def test_medium_alert_blocks_when_excess_over_30_percent(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=15_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), [VENDOR_RULE], now=NOW)

        assert alerts[0].severity == AlertSeverity.MEDIUM
        assert alerts[0].block_submission is True

    @pytest.mark.asyncio
    async def test_medium_alert_without_block(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=11_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), [VENDOR_RULE], now=NOW)

        assert alerts[0].severity == AlertSeverity.MEDIUM
        assert alerts[0].block_submission is False

    @pytest.mark.asyncio
    async def test_high_alert_blocks(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=20_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), [VENDOR_RULE], now=NOW)

        assert alerts[0].severity == AlertSeverity.HIGH
        assert alerts[0].block_submission is True

    @pytest.mark.asyncio
    async def test_no_alert_without_related_requests(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=90_000, age_days=0)
        alerts = await detect_splintering(current, [], now=NOW)
        assert alerts == []

    @pytest.mark.asyncio
    async def test_no_alert_at_threshold(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=5_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), [VENDOR_RULE], now=NOW)
        assert alerts == []

    @pytest.mark.asyncio
    async def test_requests_outside_window_ignored(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=20_000, age_days=0)
        history = vendor_history(10_000, 10_000, age_days=100)
        alerts = await detect_splintering(current, history, [VENDOR_RULE], now=NOW)
        assert alerts == []

    @pytest.mark.asyncio
    async def test_missing_costs_count_as_zero(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=None, age_days=0)
        history = vendor_history(20_000, None, 10_000)
        alerts = await detect_splintering(current, history, [VENDOR_RULE], now=NOW)
        assert alerts[0].details.total_amount == 30_000
        assert alerts[0].details.request_count == 4

    @pytest.mark.asyncio
    async def test_disabled_rule_skipped(self):
        disabled = VENDOR_RULE.model_copy(update={"enabled": False})
        current = make_snapshot("C", vendor="Acme Supplies", cost=20_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), [disabled], now=NOW)
        assert alerts == []

    @pytest.mark.asyncio
    async def test_rules_fire_independently(self):
        current = make_snapshot("C", vendor="Acme", category="IT Equipment", cost=30_000, age_days=0)
        history = [
            make_snapshot("H1", vendor="Acme", category="IT Equipment", cost=30_000, age_days=20),
        ]
        alerts = await detect_splintering(current, history, now=NOW)
        types = {a.type for a in alerts}
        assert types == {AlertType.VENDOR_SPLINTERING, AlertType.CATEGORY_SPLINTERING}

    @pytest.mark.asyncio
    async def test_department_rule(self):
        current = make_snapshot(
            "C", department="IT", description="Laptop computers for staff", cost=40_000, age_days=0
        )
        history = [
            make_snapshot("H1", department="IT", description="Laptop computers for staf", cost=40_000, age_days=200),
            make_snapshot("H2", department="IT", description="Office cleaning services", cost=40_000, age_days=30),
        ]
        alerts = await detect_splintering(current, history, [DEPARTMENT_RULE], now=NOW)

        assert len(alerts) == 1
        assert alerts[0].type == AlertType.DEPARTMENT_SPLINTERING
        assert alerts[0].details.total_amount == 80_000
        assert alerts[0].details.time_span == "365 days"

    @pytest.mark.asyncio
    async def test_description_similarity_rule(self):
        rule = SplinteringRule(
            id="description-similarity",
            name="Similar Descriptions",
            threshold_amount=10_000,
            time_window_days=30,
            strategy=RuleStrategy.DESCRIPTION,
        )
        current = make_snapshot("C", department="IT", description="Printer toner cartridges", cost=6_000, age_days=0)
        history = [
            make_snapshot("H1", department="Finance", description="Printer toner cartridge", cost=6_000),
        ]
        alerts = await detect_splintering(current, history, [rule], now=NOW)
        assert alerts[0].type == AlertType.DESCRIPTION_SIMILARITY

    @pytest.mark.asyncio
    async def test_empty_rule_list(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=20_000, age_days=0)
        assert await detect_splintering(current, vendor_history(10_000), [], now=NOW) == []


# ── Recommendations and formatting ──


class TestRecommendationsAndFormatting:
    def test_no_alerts_no_recommendations(self):
        assert get_splintering_recommendations([]) == []

    @pytest.mark.asyncio
    async def test_low_alert_gets_general_recommendations(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=10_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), [VENDOR_RULE], now=NOW)
        recommendations = get_splintering_recommendations(alerts)
        assert "Conduct competitive bidding for combined requirements" in recommendations
        assert "HIGH PRIORITY ACTIONS REQUIRED:" not in recommendations

    @pytest.mark.asyncio
    async def test_high_alert_adds_priority_actions(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=30_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000), [VENDOR_RULE], now=NOW)
        recommendations = get_splintering_recommendations(alerts)
        assert "HIGH PRIORITY ACTIONS REQUIRED:" in recommendations
        assert "Secure approval from Chief Procurement Officer" in recommendations

    @pytest.mark.asyncio
    async def test_format_blocking_alert(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=30_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000), [VENDOR_RULE], now=NOW)
        formatted = format_splintering_alert(alerts[0])

        assert formatted.title == "HIGH Risk Splintering Alert"
        assert "Contact Procurement Office" in formatted.actions
        assert "Request Count: 2" in formatted.details
        assert "Exceeds Threshold By: JMD 15,000.00" in formatted.details

    @pytest.mark.asyncio
    async def test_format_non_blocking_alert(self):
        current = make_snapshot("C", vendor="Acme Supplies", cost=10_000, age_days=0)
        alerts = await detect_splintering(current, vendor_history(10_000, 10_000), [VENDOR_RULE], now=NOW)
        formatted = format_splintering_alert(alerts[0])
        assert formatted.actions == ["Review for Consolidation", "Continue with Caution", "Document Decision"]


class TestSummarizeRequestActivity:
    def test_busy_groups_reported(self):
        requests = [
            make_snapshot(f"V{i}", vendor="Acme", department="IT", cost=1_000, requested_by="pat")
            for i in range(3)
        ] + [
            make_snapshot("X1", vendor="Other", department="IT", cost=500, requested_by="pat"),
            make_snapshot("X2", vendor="Other", department="IT", cost=500, requested_by="sam"),
            make_snapshot("OLD", vendor="Other", department="IT", cost=500, age_days=60),
        ]
        stats = summarize_request_activity(requests, time_frame_days=30, now=NOW)

        assert stats.total_requests == 5
        assert stats.time_frame == "30 days"
        assert [(g.key, g.request_count, g.total_value) for g in stats.high_frequency_vendors] == [
            ("Acme", 3, 3_000)
        ]
        assert [(g.key, g.request_count) for g in stats.high_frequency_departments] == [("IT", 5)]
        assert [(g.key, g.request_count) for g in stats.high_frequency_requesters] == [("pat", 4)]

    def test_empty(self):
        stats = summarize_request_activity([], now=NOW)
        assert stats.total_requests == 0
        assert stats.high_frequency_vendors == []


class TestRuleValidation:
    @pytest.mark.parametrize("field,value", [("time_window_days", 0), ("threshold_amount", -1)])
    def test_invalid_rule_config_rejected(self, field, value):
        data = {**VENDOR_RULE.model_dump(), field: value}
        with pytest.raises(ValidationError):
            SplinteringRule(**data)
