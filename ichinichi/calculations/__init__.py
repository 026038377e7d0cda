"""Cost normalization engine and date helpers."""

from ichinichi.calculations.costs import (
    DAYS_PER_MONTH,
    DAYS_PER_YEAR,
    build_item_fields,
    compute_cost_per_day,
    cost_per_month,
    cost_per_year,
    monthly_and_yearly_costs,
    payment_interval_days,
)
from ichinichi.calculations.dates import (
    add_months,
    add_years,
    days_between,
    default_usage_period,
    format_date,
    format_date_display,
    is_valid_date,
    is_valid_range,
    parse_date,
    today,
)
from ichinichi.calculations.formatting import (
    cadence_label,
    format_currency,
    format_currency_detailed,
    format_daily_cost,
)

__all__ = [
    # Engine
    "DAYS_PER_MONTH",
    "DAYS_PER_YEAR",
    "build_item_fields",
    "compute_cost_per_day",
    "cost_per_month",
    "cost_per_year",
    "monthly_and_yearly_costs",
    "payment_interval_days",
    # Dates
    "add_months",
    "add_years",
    "days_between",
    "default_usage_period",
    "format_date",
    "format_date_display",
    "is_valid_date",
    "is_valid_range",
    "parse_date",
    "today",
    # Formatting
    "cadence_label",
    "format_currency",
    "format_currency_detailed",
    "format_daily_cost",
]
