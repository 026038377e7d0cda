"""
Core Data Models for Ichinichi

These models define the schemas for everything flowing through the system:
1. ItemInput - what the user typed into the form (may be invalid)
2. Item - what we persist (always valid, carries the cached cost per day)
3. SummaryData / CategorySummary - derived views, never persisted

DESIGN DECISION: ItemInput is permissive and Item is strict.
The validator reports every problem with an ItemInput at field level;
an Item that violates a constraint cannot be constructed at all.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


NAME_MAX_LENGTH = 50
CATEGORY_MAX_LENGTH = 20
UNCATEGORIZED = "Uncategorized"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class PaymentCadence(str, Enum):
    """
    How often the price is paid.

    Nominal lengths: MONTHLY = 30 days, YEARLY = 365 days.
    These are deliberately not calendar-accurate.
    """
    ONE_TIME = "once"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DisplayPeriod(str, Enum):
    """Which normalized figure a summary view shows."""
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


# =============================================================================
# DATE RANGES
# =============================================================================

class DateRange(BaseModel):
    """
    An inclusive range of calendar dates.

    A reversed range can be constructed (form data may be wrong);
    `is_valid` tells whether start <= end.
    """
    model_config = ConfigDict(frozen=True)

    start_date: date = Field(..., description="First day of the range")
    end_date: date = Field(..., description="Last day of the range (inclusive)")

    @property
    def is_valid(self) -> bool:
        return self.start_date <= self.end_date

    @property
    def days(self) -> int:
        """Inclusive day count; 1 when start == end."""
        return (self.end_date - self.start_date).days + 1


# =============================================================================
# ITEM MODELS
# =============================================================================

class ItemInput(BaseModel):
    """
    Form data for creating or editing an item.

    CRITICAL: This is UNVERIFIED data. It must pass ItemValidator
    before anything is computed from it and persisted.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    name: str = Field(default="", description="Item name")
    price: float = Field(default=0.0, description="Price per payment")
    cadence: PaymentCadence = Field(
        default=PaymentCadence.ONE_TIME,
        description="Payment cadence"
    )
    payment_period: Optional[DateRange] = Field(
        default=None,
        description="Range over which billing actually occurs, if it differs from usage"
    )
    usage_period: DateRange = Field(
        ...,
        description="Range over which the item is expected to be used"
    )
    category: Optional[str] = Field(default=None, description="Free-text category")


class Item(BaseModel):
    """
    A persisted item.

    CRITICAL: cost_per_day is a cache of the engine's result for the
    other fields at the time of the last write. Anything that changes
    price, cadence or periods must go through the repository, which
    recomputes it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique item ID"
    )

    # User data
    name: str = Field(
        ...,
        min_length=1,
        max_length=NAME_MAX_LENGTH,
        description="Item name"
    )
    price: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Price per payment"
    )
    cadence: PaymentCadence = Field(
        ...,
        description="Payment cadence"
    )
    payment_period: Optional[DateRange] = None
    usage_period: DateRange
    category: Optional[str] = Field(
        default=None,
        max_length=CATEGORY_MAX_LENGTH,
        description="Category (None means uncategorized)"
    )

    # Derived
    cost_per_day: float = Field(
        ...,
        allow_inf_nan=False,
        description="Canonical normalized cost per day"
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the item was created"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    @field_validator('category')
    @classmethod
    def empty_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @model_validator(mode='after')
    def validate_periods(self) -> 'Item':
        """Validate date relationships."""
        if not self.usage_period.is_valid:
            raise ValueError("Usage period end cannot be before start")

        if self.payment_period and not self.payment_period.is_valid:
            raise ValueError("Payment period end cannot be before start")

        return self

    def to_input(self) -> ItemInput:
        """Rebuild the form data this item was created from (for editing)."""
        return ItemInput(
            name=self.name,
            price=self.price,
            cadence=self.cadence,
            payment_period=self.payment_period,
            usage_period=self.usage_period,
            category=self.category,
        )


# =============================================================================
# SUMMARY MODELS (derived, never persisted)
# =============================================================================

class CategorySummary(BaseModel):
    """Totals for one category bucket."""

    category: str
    total_cost_per_day: float = 0.0
    total_cost_per_month: float = 0.0
    total_cost_per_year: float = 0.0
    item_count: int = Field(default=0, ge=0)


class SummaryData(BaseModel):
    """
    Portfolio-wide totals plus per-category subtotals.

    category_summary is ordered by total_cost_per_day, highest first.
    """

    total_cost_per_day: float = 0.0
    total_cost_per_month: float = 0.0
    total_cost_per_year: float = 0.0
    category_summary: list[CategorySummary] = Field(default_factory=list)
