"""
Splintering rule configuration.

Rules live in an external rule store (see repositories.RuleRepository) and are
edited by procurement administrators. The defaults below are used when the
store has nothing configured.
"""

import logging

from procurement_engine.config import Settings
from procurement_engine.schemas.splintering import AlertType, RuleStrategy, SplinteringRule

logger = logging.getLogger("procurement.splintering.rules")

DEFAULT_RULES = [
    SplinteringRule(
        id="vendor-threshold",
        name="Vendor Spending Threshold",
        description="Flags multiple requests to same vendor within time period",
        threshold_amount=25_000,
        time_window_days=90,
        strategy=RuleStrategy.VENDOR,
    ),
    SplinteringRule(
        id="category-threshold",
        name="Category Spending Threshold",
        description="Flags multiple requests in same category within time period",
        threshold_amount=50_000,
        time_window_days=180,
        strategy=RuleStrategy.CATEGORY,
    ),
    SplinteringRule(
        id="department-threshold",
        name="Department Spending Threshold",
        description="Flags multiple similar requests from same department",
        threshold_amount=75_000,
        time_window_days=365,
        strategy=RuleStrategy.DEPARTMENT,
    ),
]

ALERT_TYPE_BY_STRATEGY = {
    RuleStrategy.VENDOR: AlertType.VENDOR_SPLINTERING,
    RuleStrategy.CATEGORY: AlertType.CATEGORY_SPLINTERING,
    RuleStrategy.DEPARTMENT: AlertType.DEPARTMENT_SPLINTERING,
    RuleStrategy.DESCRIPTION: AlertType.DESCRIPTION_SIMILARITY,
}


def build_default_rules(settings: Settings) -> list[SplinteringRule]:
    """Default rule set with thresholds and windows taken from settings."""
    overrides = {
        RuleStrategy.VENDOR: (settings.vendor_rule_threshold, settings.vendor_rule_window_days),
        RuleStrategy.CATEGORY: (settings.category_rule_threshold, settings.category_rule_window_days),
        RuleStrategy.DEPARTMENT: (settings.department_rule_threshold, settings.department_rule_window_days),
    }
    rules = []
    for rule in DEFAULT_RULES:
        threshold, window = overrides[rule.strategy]
        rules.append(rule.model_copy(update={"threshold_amount": threshold, "time_window_days": window}))
    logger.debug("Built %d default splintering rules", len(rules))
    return rules


def active_rules(rules: list[SplinteringRule]) -> list[SplinteringRule]:
    return [rule for rule in rules if rule.enabled]
