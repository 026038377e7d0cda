"""
Item Validation

DESIGN DECISION: Validation happens at the boundary, before the engine.
The cost engine trusts its input; this module is what makes that safe.

STAGE 1 - FIELD VALIDATION (errors, block submission):
- Name present and at most 50 characters
- Price strictly positive and finite
- The resulting cost per day is finite
- Usage period is a valid range
- Payment period, if given, is a valid range
- Category at most 20 characters

STAGE 2 - CONSISTENCY CHECKS (warnings, do not block):
- Payment period that never overlaps the usage period

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show a message next to each field.
"""

import math

from ichinichi.calculations.costs import compute_cost_per_day
from ichinichi.calculations.dates import is_valid_range
from ichinichi.models.item import (
    CATEGORY_MAX_LENGTH,
    NAME_MAX_LENGTH,
    ItemInput,
)
from ichinichi.models.validation import ValidationIssue, ValidationResult


class ItemValidationError(Exception):
    """
    Raised when an ItemInput fails validation at the repository boundary.

    Carries the full ValidationResult so callers can show field-level messages.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            f"{issue.field}: {issue.message}"
            for issue in result.issues
            if issue.severity == "error"
        )
        super().__init__(f"Invalid item: {messages}")

    @property
    def field_errors(self) -> dict[str, str]:
        return self.result.field_errors()


class ItemValidator:
    """Validates item form data."""

    def _validate_fields(self, data: ItemInput) -> list[ValidationIssue]:
        """Stage 1: field-level checks."""
        issues = []

        if not data.name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Name is required",
                severity="error",
            ))
        elif len(data.name) > NAME_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="name",
                issue_type="too_long",
                message=f"Name must be at most {NAME_MAX_LENGTH} characters",
                severity="error",
                suggested_fix="Use a shorter name",
            ))

        if not math.isfinite(data.price):
            issues.append(ValidationIssue(
                field="price",
                issue_type="invalid_value",
                message="Price must be a finite number",
                severity="error",
            ))
        elif data.price <= 0:
            issues.append(ValidationIssue(
                field="price",
                issue_type="invalid_value",
                message="Price must be greater than zero",
                severity="error",
            ))

        usage = data.usage_period
        if not is_valid_range(usage.start_date, usage.end_date):
            issues.append(ValidationIssue(
                field="usage_period",
                issue_type="invalid_range",
                message="Usage period dates are not valid",
                severity="error",
                suggested_fix="The end date must be on or after the start date",
            ))

        payment = data.payment_period
        if payment is not None and not is_valid_range(payment.start_date, payment.end_date):
            issues.append(ValidationIssue(
                field="payment_period",
                issue_type="invalid_range",
                message="Payment period dates are not valid",
                severity="error",
                suggested_fix="The end date must be on or after the start date",
            ))

        if data.category and len(data.category) > CATEGORY_MAX_LENGTH:
            issues.append(ValidationIssue(
                field="category",
                issue_type="too_long",
                message=f"Category must be at most {CATEGORY_MAX_LENGTH} characters",
                severity="error",
            ))

        return issues

    def _check_computable(self, data: ItemInput) -> list[ValidationIssue]:
        """Fields are valid on their own, but the cost may still overflow."""
        if math.isfinite(compute_cost_per_day(data)):
            return []
        return [ValidationIssue(
            field="price",
            issue_type="out_of_range",
            message="Price is too large to compute a daily cost",
            severity="error",
        )]

    def _check_consistency(self, data: ItemInput) -> list[ValidationIssue]:
        """Stage 2: soft checks on otherwise valid data."""
        issues = []

        payment = data.payment_period
        usage = data.usage_period
        if payment is not None and (
            payment.end_date < usage.start_date
            or payment.start_date > usage.end_date
        ):
            issues.append(ValidationIssue(
                field="payment_period",
                issue_type="no_overlap",
                message="Payment period does not overlap the usage period",
                severity="warning",
                suggested_fix="Please verify both periods",
            ))

        return issues

    def validate(self, data: ItemInput) -> ValidationResult:
        """
        Run both stages.

        Stage 2 only runs when stage 1 found no errors.
        """
        issues = self._validate_fields(data)
        if not issues:
            issues.extend(self._check_computable(data))
        fields_valid = not any(issue.severity == "error" for issue in issues)

        if fields_valid:
            issues.extend(self._check_consistency(data))

        return ValidationResult(
            is_valid=fields_valid,
            issues=issues,
            warnings=[i.message for i in issues if i.severity == "warning"],
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary text shown above the form."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
