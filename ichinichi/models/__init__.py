"""
Data Models Package

This package contains all Pydantic models used in Ichinichi.
All data flowing through the system must conform to these schemas.
"""

from ichinichi.models.item import (
    CATEGORY_MAX_LENGTH,
    NAME_MAX_LENGTH,
    UNCATEGORIZED,
    CategorySummary,
    DateRange,
    DisplayPeriod,
    Item,
    ItemInput,
    PaymentCadence,
    SummaryData,
)
from ichinichi.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from ichinichi.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Item models
    "CATEGORY_MAX_LENGTH",
    "NAME_MAX_LENGTH",
    "UNCATEGORIZED",
    "CategorySummary",
    "DateRange",
    "DisplayPeriod",
    "Item",
    "ItemInput",
    "PaymentCadence",
    "SummaryData",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
