"""Validation package."""

from ichinichi.validation.validator import ItemValidationError, ItemValidator

__all__ = ["ItemValidationError", "ItemValidator"]
