from procurement_engine.splintering.detectors import (
    cutoff_date,
    detect_splintering,
    format_splintering_alert,
    get_splintering_recommendations,
    summarize_request_activity,
)
from procurement_engine.splintering.rules import DEFAULT_RULES, build_default_rules
from procurement_engine.splintering.similarity import edit_distance, similarity

__all__ = [
    "DEFAULT_RULES",
    "build_default_rules",
    "cutoff_date",
    "detect_splintering",
    "edit_distance",
    "format_splintering_alert",
    "get_splintering_recommendations",
    "similarity",
    "summarize_request_activity",
]
