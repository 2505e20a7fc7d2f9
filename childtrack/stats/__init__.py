from .aggregator import (
    diaper_aggregate,
    diaper_breakdown,
    event_counts,
    feeding_aggregate,
    feeding_count_aggregate,
    growth_series,
    medication_aggregate,
    percent_change,
    sleep_aggregate,
    sleep_quality_distribution,
    temperature_aggregate,
    total_sleep_minutes,
)
from .buckets import InvalidWindowError, Window, empty_buckets, get_timezone
from .details import extract_label, format_details, parse_details, resolve_details

__all__ = [
    "InvalidWindowError", "Window", "empty_buckets", "get_timezone",
    "extract_label", "format_details", "parse_details", "resolve_details",
    "diaper_aggregate", "diaper_breakdown", "event_counts", "feeding_aggregate",
    "feeding_count_aggregate", "growth_series", "medication_aggregate",
    "percent_change", "sleep_aggregate", "sleep_quality_distribution",
    "temperature_aggregate", "total_sleep_minutes",
]
