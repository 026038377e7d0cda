"""
Aggregation Engine

DESIGN DECISION: Summaries are DERIVED, never stored.
Every function here is a pure fold over a snapshot of items, cheap
enough to call on every page render.

Month and year totals are sums of each item's own month/year figure
(exact for monthly/yearly cadences), never total_cost_per_day * 30.
"""

from typing import Iterable, Optional, Union

from ichinichi.calculations.costs import monthly_and_yearly_costs
from ichinichi.models.item import (
    UNCATEGORIZED,
    CategorySummary,
    DisplayPeriod,
    Item,
    SummaryData,
)


DEFAULT_RANKING_LIMIT = 10


def summarize(
    items: Iterable[Item],
    uncategorized_label: str = UNCATEGORIZED,
) -> SummaryData:
    """
    Fold items into portfolio totals and per-category subtotals.

    Categories are emitted highest daily cost first; ties keep the order
    in which the categories were first seen.
    """
    items = list(items)
    groups: dict[str, CategorySummary] = {}

    for item in items:
        key = item.category or uncategorized_label
        group = groups.get(key)
        if group is None:
            group = CategorySummary(category=key)
            groups[key] = group

        month, year = monthly_and_yearly_costs(item)
        group.total_cost_per_day += item.cost_per_day
        group.total_cost_per_month += month
        group.total_cost_per_year += year
        group.item_count += 1

    category_summary = sorted(
        groups.values(),
        key=lambda g: g.total_cost_per_day,
        reverse=True,
    )

    return SummaryData(
        total_cost_per_day=sum(item.cost_per_day for item in items),
        total_cost_per_month=sum(g.total_cost_per_month for g in category_summary),
        total_cost_per_year=sum(g.total_cost_per_year for g in category_summary),
        category_summary=category_summary,
    )


def rank_top_items(
    items: Iterable[Item],
    limit: Optional[int] = DEFAULT_RANKING_LIMIT,
) -> list[Item]:
    """
    Highest cost-per-day items first, truncated to `limit` (None = all).

    The sort is stable: equal costs keep their original relative order.
    The input is not modified.
    """
    ranked = sorted(items, key=lambda item: item.cost_per_day, reverse=True)
    return ranked[:limit]


def items_by_category(
    items: Iterable[Item],
    category: Optional[str] = None,
) -> list[Item]:
    """Items in one category; all items when no category is given."""
    if not category:
        return list(items)
    return [item for item in items if item.category == category]


def all_categories(items: Iterable[Item]) -> list[str]:
    """Distinct non-empty categories, sorted."""
    return sorted({item.category for item in items if item.category})


def period_value(
    totals: Union[SummaryData, CategorySummary],
    period: DisplayPeriod,
) -> float:
    """Pick the day/month/year figure from a summary or category bucket."""
    if period == DisplayPeriod.MONTH:
        return totals.total_cost_per_month
    if period == DisplayPeriod.YEAR:
        return totals.total_cost_per_year
    return totals.total_cost_per_day


def category_breakdown(
    summary: SummaryData,
    period: DisplayPeriod = DisplayPeriod.DAY,
) -> list[dict]:
    """Chart rows for the category view, in summary order."""
    return [
        {
            "category": group.category,
            "value": period_value(group, period),
            "item_count": group.item_count,
        }
        for group in summary.category_summary
    ]


def item_rows(
    items: Iterable[Item],
    uncategorized_label: str = UNCATEGORIZED,
) -> list[dict]:
    """
    Flat rows for the item list view, highest daily cost first.

    Month/year figures are computed here since they are not stored.
    """
    rows = []
    for item in rank_top_items(items, limit=None):
        month, year = monthly_and_yearly_costs(item)
        rows.append({
            "id": str(item.id),
            "name": item.name,
            "price": item.price,
            "cadence": item.cadence.value,
            "usage_start": item.usage_period.start_date,
            "usage_end": item.usage_period.end_date,
            "category": item.category or uncategorized_label,
            "cost_per_day": item.cost_per_day,
            "cost_per_month": month,
            "cost_per_year": year,
        })
    return rows
