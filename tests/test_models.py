"""
Tests for Ichinichi models

Test strategy:
1. Unit tests for individual components (models, engine, validators)
2. Repository tests against the in-memory backend
3. No real API calls in tests (Google Sheets is faked)
"""

import pytest
from datetime import date
from uuid import uuid4

from ichinichi.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    CategorySummary,
    DateRange,
    Item,
    ItemInput,
    PaymentCadence,
    SummaryData,
    ValidationIssue,
    ValidationResult,
)


class TestDateRange:
    """Tests for the DateRange model."""

    def test_single_day_range(self):
        """A range that starts and ends on the same day spans one day."""
        r = DateRange(start_date=date(2024, 5, 1), end_date=date(2024, 5, 1))
        assert r.days == 1
        assert r.is_valid is True

    def test_reversed_range_is_constructible_but_invalid(self):
        """Form data may be reversed; the model reports it instead of raising."""
        r = DateRange(start_date=date(2024, 5, 2), end_date=date(2024, 5, 1))
        assert r.is_valid is False
        assert r.days == 0

    def test_parses_iso_strings(self):
        r = DateRange(start_date="2024-01-01", end_date="2024-12-31")
        assert r.start_date == date(2024, 1, 1)
        assert r.days == 366


class TestItemInput:
    """Tests for the permissive form model."""

    def test_strips_whitespace(self):
        data = ItemInput(
            name="  Phone  ",
            price=100,
            usage_period=DateRange(start_date=date(2024, 1, 1), end_date=date(2024, 1, 2)),
        )
        assert data.name == "Phone"
        assert data.cadence == PaymentCadence.ONE_TIME

    def test_accepts_invalid_values(self):
        """Validation is the validator's job, not the model's."""
        data = ItemInput(
            name="",
            price=-5,
            usage_period=DateRange(start_date=date(2024, 1, 2), end_date=date(2024, 1, 1)),
            category="x" * 30,
        )
        assert data.price == -5

    def test_cadence_from_value(self):
        data = ItemInput(
            name="Gym",
            price=50,
            cadence="monthly",
            usage_period=DateRange(start_date=date(2024, 1, 1), end_date=date(2024, 1, 2)),
        )
        assert data.cadence is PaymentCadence.MONTHLY


class TestItem:
    """Tests for the strict persisted model."""

    def _item(self, **overrides):
        fields = dict(
            name="Laptop",
            price=3000.0,
            cadence=PaymentCadence.ONE_TIME,
            usage_period=DateRange(start_date=date(2024, 1, 1), end_date=date(2024, 1, 30)),
            cost_per_day=100.0,
        )
        fields.update(overrides)
        return Item(**fields)

    def test_item_creation_assigns_identity(self):
        item = self._item()
        assert item.id is not None
        assert item.created_at is not None
        assert item.category is None

    def test_empty_category_becomes_none(self):
        assert self._item(category="").category is None

    def test_rejects_non_positive_price(self):
        with pytest.raises(ValueError):
            self._item(price=0)

    @pytest.mark.parametrize("field", ["price", "cost_per_day"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_rejects_non_finite_numbers(self, field, value):
        with pytest.raises(ValueError):
            self._item(**{field: value})

    def test_rejects_long_name(self):
        with pytest.raises(ValueError):
            self._item(name="x" * 51)

    def test_rejects_long_category(self):
        with pytest.raises(ValueError):
            self._item(category="x" * 21)

    def test_rejects_reversed_usage_period(self):
        with pytest.raises(ValueError, match="Usage period end cannot be before start"):
            self._item(usage_period=DateRange(
                start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)
            ))

    def test_rejects_reversed_payment_period(self):
        with pytest.raises(ValueError, match="Payment period end cannot be before start"):
            self._item(payment_period=DateRange(
                start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)
            ))

    def test_to_input_round_trips_user_fields(self):
        item = self._item(category="Tech")
        data = item.to_input()
        assert data.name == item.name
        assert data.price == item.price
        assert data.category == "Tech"
        assert data.usage_period == item.usage_period


class TestSummaryModels:
    def test_defaults_are_zero(self):
        summary = SummaryData()
        assert summary.total_cost_per_day == 0
        assert summary.category_summary == []

    def test_category_count_not_negative(self):
        with pytest.raises(ValueError):
            CategorySummary(category="x", item_count=-1)


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.ITEM_CREATED,
            description="Item created",
        )
        assert event.event_type == AuditEventType.ITEM_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.ITEM_DELETED,
            description="Item deleted",
            details={"name": "Laptop"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "item_deleted"
        assert log_dict["details"]["name"] == "Laptop"

    def test_audit_event_to_sheets_row(self):
        event = AuditEvent(
            event_type=AuditEventType.ITEM_UPDATED,
            description="Item updated",
            is_user_action=True,
        )
        row = event.to_sheets_row()
        assert len(row) == 11
        assert row[2] == "item_updated"
        assert row[10] == "True"

    def test_builder_item_created(self):
        item_id = uuid4()
        correlation_id = uuid4()
        event = AuditEventBuilder.item_created(
            item_id=item_id,
            name="Laptop",
            cost_per_day=12.5,
            correlation_id=correlation_id,
        )
        assert event.entity_id == item_id
        assert event.correlation_id == correlation_id
        assert event.details["cost_per_day"] == 12.5
        assert event.is_user_action is True

    def test_builder_failures_have_elevated_severity(self):
        assert AuditEventBuilder.item_not_found(uuid4(), "update").severity == AuditSeverity.WARNING
        assert AuditEventBuilder.save_failed("create", "boom").severity == AuditSeverity.ERROR


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_field_errors_first_message_per_field(self):
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(field="name", issue_type="missing", message="Name is required", severity="error"),
                ValidationIssue(field="name", issue_type="too_long", message="second", severity="error"),
                ValidationIssue(field="payment_period", issue_type="no_overlap", message="warn", severity="warning"),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 2
        assert result.field_errors() == {"name": "Name is required"}

    def test_warnings_only(self):
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(field="payment_period", issue_type="no_overlap", message="warn", severity="warning"),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
