"""
Presentation formatting.

Rounding happens here and only here; the engine works with raw floats.
Python's round-half-to-even is used throughout.
"""

from ichinichi.models.item import PaymentCadence


DEFAULT_CURRENCY_SYMBOL = "¥"

CADENCE_LABELS = {
    PaymentCadence.ONE_TIME: "One-time",
    PaymentCadence.MONTHLY: "Monthly",
    PaymentCadence.YEARLY: "Yearly",
}


def _format(amount: float, decimals: int, symbol: str) -> str:
    rounded = round(amount, decimals)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.{decimals}f}"


def format_currency(amount: float, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Whole currency units with thousands separators, e.g. '¥1,235'."""
    return _format(amount, 0, symbol)


def format_currency_detailed(amount: float, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Two decimals, used for the form's cost preview."""
    return _format(amount, 2, symbol)


def format_daily_cost(amount: float, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    return format_currency(amount, symbol)


def cadence_label(cadence: PaymentCadence) -> str:
    return CADENCE_LABELS.get(cadence, str(cadence))
