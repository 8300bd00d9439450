from procurement_engine.thresholds.evaluator import (
    check_executive_threshold,
    should_show_threshold_notification,
)

__all__ = ["check_executive_threshold", "should_show_threshold_notification"]
