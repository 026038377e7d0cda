"""Summary and ranking queries over item snapshots."""

from ichinichi.queries.summary import (
    DEFAULT_RANKING_LIMIT,
    all_categories,
    category_breakdown,
    item_rows,
    items_by_category,
    period_value,
    rank_top_items,
    summarize,
)

__all__ = [
    "DEFAULT_RANKING_LIMIT",
    "all_categories",
    "category_breakdown",
    "item_rows",
    "items_by_category",
    "period_value",
    "rank_top_items",
    "summarize",
]
