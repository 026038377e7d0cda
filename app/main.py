"""
Streamlit Frontend for Ichinichi

A thin shell over ItemRepository. Every number shown here comes from
the cost engine or the summary functions; the UI computes nothing itself.

DESIGN PRINCIPLES:
1. Show what each purchase costs per day, month and year
2. Validation messages appear next to the field they concern
3. Live cost preview while editing
4. No hidden actions (deletes ask for confirmation)
"""

import asyncio
from typing import Optional
from uuid import UUID

import streamlit as st

from ichinichi.audit import configure_logging, create_correlation_id
from ichinichi.calculations import (
    cadence_label,
    default_usage_period,
    format_currency,
    format_currency_detailed,
    format_daily_cost,
    format_date_display,
)
from ichinichi.config import get_settings, validate_all_settings
from ichinichi.models import (
    DateRange,
    DisplayPeriod,
    Item,
    ItemInput,
    PaymentCadence,
)
from ichinichi.queries import category_breakdown, item_rows, period_value
from ichinichi.repository import ItemRepository, create_app_components
from ichinichi.services.storage import NotFoundError, StorageError
from ichinichi.validation import ItemValidationError


# Page configuration
st.set_page_config(
    page_title="Ichinichi",
    page_icon="📅",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

PERIOD_LABELS = {
    DisplayPeriod.DAY: "per day",
    DisplayPeriod.MONTH: "per month",
    DisplayPeriod.YEAR: "per year",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_repository() -> ItemRepository:
    """Get or create the repository (cached across reruns)."""
    configure_logging(debug=get_settings().app.debug_mode)
    return create_app_components()


def money(amount: float) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def main():
    """Main application entry point."""
    repository = get_repository()

    st.sidebar.title("📅 Ichinichi")
    st.sidebar.markdown("---")

    pages = ["📊 Dashboard", "📋 Items", "➕ Add Item", "⚙️ Settings"]
    if "page" not in st.session_state:
        st.session_state.page = pages[0]

    page = st.sidebar.radio("Navigate to:", pages, key="page")

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How it works:**
        1. Add what you bought or subscribe to
        2. Say how long you expect to use it
        3. See what it really costs per day
        """
    )

    if page == "📊 Dashboard":
        render_dashboard_page(repository)
    elif page == "📋 Items":
        render_items_page(repository)
    elif page == "➕ Add Item":
        render_add_page(repository)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_dashboard_page(repository: ItemRepository):
    """Summary card, ranking and category breakdown."""
    st.title("📊 Dashboard")

    items = run_async(repository.list_items())
    if not items:
        st.info("No items yet. Use 'Add Item' to register your first purchase.")
        return

    summary = run_async(repository.summary())

    period = st.radio(
        "Show costs",
        options=list(DisplayPeriod),
        format_func=lambda p: PERIOD_LABELS[p],
        horizontal=True,
    )

    st.markdown(
        f'<div class="big-number">{money(period_value(summary, period))}</div>'
        f"<p>total {PERIOD_LABELS[period]} across {len(items)} items</p>",
        unsafe_allow_html=True,
    )

    col1, col2, col3 = st.columns(3)
    col1.metric("Per day", money(summary.total_cost_per_day))
    col2.metric("Per month", money(summary.total_cost_per_month))
    col3.metric("Per year", money(summary.total_cost_per_year))

    st.markdown("---")
    st.subheader("🏆 Highest daily cost")
    top_items = run_async(repository.top_items())
    symbol = get_settings().app.currency_symbol
    st.table([
        {
            "#": rank,
            "Name": item.name,
            "Per day": format_daily_cost(item.cost_per_day, symbol),
        }
        for rank, item in enumerate(top_items, start=1)
    ])

    st.markdown("---")
    st.subheader("🗂️ By category")
    breakdown = category_breakdown(summary, period)
    st.bar_chart(breakdown, x="category", y="value")
    st.table([
        {
            "Category": group.category,
            "Items": group.item_count,
            "Per day": money(group.total_cost_per_day),
            "Per month": money(group.total_cost_per_month),
            "Per year": money(group.total_cost_per_year),
        }
        for group in summary.category_summary
    ])


def render_items_page(repository: ItemRepository):
    """Item list with edit and delete."""
    st.title("📋 Items")

    editing_id: Optional[str] = st.session_state.get("editing_id")
    if editing_id:
        render_edit_page(repository, UUID(editing_id))
        return

    categories = run_async(repository.categories())
    category = st.selectbox(
        "Filter by Category",
        options=[None] + categories,
        format_func=lambda c: "All Categories" if c is None else c,
    )
    items = run_async(repository.items_by_category(category))

    if not items:
        st.info("No items to show.")
        return

    uncategorized = get_settings().app.uncategorized_label
    for row in item_rows(items, uncategorized_label=uncategorized):
        with st.container(border=True):
            col1, col2, col3 = st.columns([4, 4, 2])
            with col1:
                st.markdown(f"**{row['name']}**  ·  {row['category']}")
                st.caption(
                    f"{money(row['price'])} {cadence_label(PaymentCadence(row['cadence']))}"
                    f" · {format_date_display(row['usage_start'])}"
                    f" → {format_date_display(row['usage_end'])}"
                )
            with col2:
                st.markdown(
                    f"{money(row['cost_per_day'])} / day · "
                    f"{money(row['cost_per_month'])} / month · "
                    f"{money(row['cost_per_year'])} / year"
                )
            with col3:
                if st.button("✏️ Edit", key=f"edit-{row['id']}"):
                    st.session_state.editing_id = row["id"]
                    st.rerun()
                confirm = st.checkbox("Confirm delete", key=f"confirm-{row['id']}")
                if st.button("🗑️ Delete", key=f"delete-{row['id']}", disabled=not confirm):
                    try:
                        run_async(repository.delete(
                            UUID(row["id"]),
                            correlation_id=create_correlation_id(),
                        ))
                    except NotFoundError:
                        st.error("Item not found. It may already have been deleted.")
                    except StorageError as e:
                        st.error(f"Failed to delete: {e}")
                    else:
                        st.rerun()


def render_add_page(repository: ItemRepository):
    st.title("➕ Add Item")

    data = render_item_form(repository, initial=None, key_prefix="new")
    if data is None:
        return

    try:
        item = run_async(repository.create(data, correlation_id=create_correlation_id()))
    except ItemValidationError as e:
        st.session_state["new-errors"] = e.field_errors
        st.rerun()
    except StorageError as e:
        st.error(f"Failed to save: {e}")
    else:
        st.session_state.pop("new-errors", None)
        st.success(
            f"Saved **{item.name}**: {money(item.cost_per_day)} per day."
        )


def render_edit_page(repository: ItemRepository, item_id: UUID):
    st.subheader("✏️ Edit Item")

    try:
        item = run_async(repository.get(item_id))
    except NotFoundError:
        st.session_state.editing_id = None
        st.error("Item not found.")
        return

    if st.button("← Back to list"):
        st.session_state.editing_id = None
        st.rerun()

    data = render_item_form(repository, initial=item, key_prefix=f"edit-{item_id}")
    if data is None:
        return

    try:
        run_async(repository.update(item_id, data, correlation_id=create_correlation_id()))
    except ItemValidationError as e:
        st.session_state[f"edit-{item_id}-errors"] = e.field_errors
        st.rerun()
    except NotFoundError:
        st.session_state.editing_id = None
        st.error("Item not found. It may have been deleted.")
    except StorageError as e:
        st.error(f"Failed to save: {e}")
    else:
        st.session_state.pop(f"edit-{item_id}-errors", None)
        st.session_state.editing_id = None
        st.rerun()


def render_item_form(
    repository: ItemRepository,
    initial: Optional[Item],
    key_prefix: str,
) -> Optional[ItemInput]:
    """
    Render the item form.

    Returns the submitted ItemInput when Save is clicked, otherwise None.
    Widgets live outside st.form so the payment period toggle and the
    cost preview update immediately.
    """
    errors: dict = st.session_state.get(f"{key_prefix}-errors", {})
    default_start, default_end = default_usage_period()

    name = st.text_input(
        "Name *",
        value=initial.name if initial else "",
        max_chars=50,
        help="Up to 50 characters",
        key=f"{key_prefix}-name",
    )
    if "name" in errors:
        st.error(errors["name"])

    price = st.number_input(
        f"Price ({get_settings().app.currency_symbol}) *",
        value=float(initial.price) if initial else 0.0,
        min_value=0.0,
        step=1.0,
        key=f"{key_prefix}-price",
    )
    if "price" in errors:
        st.error(errors["price"])

    cadence = st.selectbox(
        "Payment cadence *",
        options=list(PaymentCadence),
        index=list(PaymentCadence).index(initial.cadence) if initial else 0,
        format_func=cadence_label,
        key=f"{key_prefix}-cadence",
    )

    has_payment_period = st.toggle(
        "Specify a payment period",
        value=bool(initial and initial.payment_period),
        key=f"{key_prefix}-has-payment",
    )

    col1, col2 = st.columns(2)
    usage = initial.usage_period if initial else None
    with col1:
        usage_start = st.date_input(
            "Usage start *",
            value=usage.start_date if usage else default_start,
            key=f"{key_prefix}-usage-start",
        )
    with col2:
        usage_end = st.date_input(
            "Usage end *",
            value=usage.end_date if usage else default_end,
            key=f"{key_prefix}-usage-end",
        )
    if "usage_period" in errors:
        st.error(errors["usage_period"])

    payment_period = None
    if has_payment_period:
        # New payment periods start out equal to the usage period
        payment = (initial.payment_period if initial else None) or DateRange(
            start_date=usage_start, end_date=usage_end
        )
        col1, col2 = st.columns(2)
        with col1:
            payment_start = st.date_input(
                "Payment start",
                value=payment.start_date,
                key=f"{key_prefix}-payment-start",
            )
        with col2:
            payment_end = st.date_input(
                "Payment end",
                value=payment.end_date,
                key=f"{key_prefix}-payment-end",
            )
        payment_period = DateRange(start_date=payment_start, end_date=payment_end)
        if "payment_period" in errors:
            st.error(errors["payment_period"])

    category = st.text_input(
        "Category",
        value=(initial.category or "") if initial else "",
        max_chars=20,
        help="Up to 20 characters (optional)",
        key=f"{key_prefix}-category",
    )
    if "category" in errors:
        st.error(errors["category"])

    data = ItemInput(
        name=name,
        price=price,
        cadence=cadence,
        payment_period=payment_period,
        usage_period=DateRange(start_date=usage_start, end_date=usage_end),
        category=category or None,
    )

    preview = repository.preview_cost_per_day(data)
    if preview is not None and preview > 0:
        st.info(
            "**Cost per day (preview):** "
            f"{format_currency_detailed(preview, get_settings().app.currency_symbol)}"
        )

    result = repository.validate(data)
    for warning in result.warnings:
        st.warning(warning)

    if st.button("💾 Save", type="primary", key=f"{key_prefix}-save"):
        return data
    return None


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    settings = get_settings().app
    st.markdown("### Storage")
    st.markdown(f"**Backend:** `{settings.storage_backend.value}`")
    if settings.storage_backend.value == "json":
        st.markdown(f"**Data file:** `{settings.data_file_path}`")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    sections = [
        ("Application", "app"),
        ("Google Sheets (optional storage)", "google_sheets"),
    ]
    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
