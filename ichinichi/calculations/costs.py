"""
Cost Normalization Engine

Converts an item's price, cadence and periods into one canonical
number: cost per day. Month and year figures are derived from it.

DESIGN DECISION: Recurring prices are per-cycle amounts, not per-day
amounts. We reconstruct the total actually paid (price x number of
billing cycles) and spread it over the usage window. The cycle count
is rounded UP: a partial final cycle is still a paid cycle.

Nominal day counts (30 per month, 365 per year) are used everywhere,
both here and in the derived month/year figures, so the numbers stay
consistent with each other even though they are not calendar-exact.

IMPORTANT: This module never raises on numeric input. Positivity of
the price is checked by the validator before we get here.
"""

import math
from typing import Union

from ichinichi.calculations.dates import days_between
from ichinichi.models.item import Item, ItemInput, PaymentCadence


DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365
MONTHS_PER_YEAR = 12


def payment_interval_days(cadence: PaymentCadence) -> int:
    """Nominal billing interval in days (0 for one-time payments)."""
    if cadence == PaymentCadence.MONTHLY:
        return DAYS_PER_MONTH
    if cadence == PaymentCadence.YEARLY:
        return DAYS_PER_YEAR
    return 0


def compute_cost_per_day(data: Union[ItemInput, Item]) -> float:
    """
    Compute the canonical cost per day.

    - One-time: price spread evenly over the usage window.
    - Monthly/Yearly: price x ceil(billing days / interval), spread over
      the usage window. Billing days come from the payment period when
      one is given, otherwise from the usage period.

    A usage window of zero or negative days yields 0.0.
    """
    usage = data.usage_period
    usage_days = days_between(usage.start_date, usage.end_date)

    if usage_days <= 0:
        return 0.0

    if data.cadence == PaymentCadence.ONE_TIME:
        return data.price / usage_days

    interval_days = payment_interval_days(data.cadence)

    if data.payment_period is not None:
        payment = data.payment_period
        billed_days = days_between(payment.start_date, payment.end_date)
    else:
        billed_days = usage_days

    payment_count = math.ceil(billed_days / interval_days)
    total_cost = data.price * payment_count
    return total_cost / usage_days


def cost_per_month(item: Item) -> float:
    """
    Monthly figure for an item.

    Uses the exact price when the cadence is monthly (or price / 12 when
    yearly) rather than round-tripping through cost_per_day.
    """
    if item.cadence == PaymentCadence.MONTHLY:
        return item.price
    if item.cadence == PaymentCadence.YEARLY:
        return item.price / MONTHS_PER_YEAR
    return item.cost_per_day * DAYS_PER_MONTH


def cost_per_year(item: Item) -> float:
    """Yearly figure for an item; exact for monthly and yearly cadences."""
    if item.cadence == PaymentCadence.MONTHLY:
        return item.price * MONTHS_PER_YEAR
    if item.cadence == PaymentCadence.YEARLY:
        return item.price
    return item.cost_per_day * DAYS_PER_YEAR


def monthly_and_yearly_costs(item: Item) -> tuple[float, float]:
    return cost_per_month(item), cost_per_year(item)


def build_item_fields(data: ItemInput) -> dict:
    """
    The persisted field set for an ItemInput, with cost_per_day computed.

    Identity and timestamps are the repository's job and are not included.
    """
    return {
        "name": data.name,
        "price": data.price,
        "cadence": data.cadence,
        "payment_period": data.payment_period,
        "usage_period": data.usage_period,
        "category": data.category or None,
        "cost_per_day": compute_cost_per_day(data),
    }
