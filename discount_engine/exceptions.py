"""
Discount Engine Custom Exceptions
=================================

Centralized exception hierarchy for the allocation engine.
All exceptions inherit from DiscountEngineError for easy catching at boundaries.

Usage:
    from discount_engine.exceptions import ConfigurationError, DataValidationError

    try:
        config = load_config("config/discounts.json")
    except ConfigurationError as e:
        logger.error(f"Refusing to start: {e}")
"""

from typing import Optional, Any, Dict


class DiscountEngineError(Exception):
    """Base exception for all discount engine errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


# =============================================================================
# Data Validation Errors
# =============================================================================

class DataValidationError(DiscountEngineError):
    """Input data failed validation checks."""

    def __init__(
        self,
        context: str,
        details: str,
        field: Optional[str] = None,
        value: Optional[Any] = None
    ):
        self.field = field
        self.value = value

        msg = f"Validation failed in {context}: {details}"
        if field:
            shown = f"field={field}" if value is None else f"field={field}, value={value}"
            msg += f" ({shown})"

        ctx = {"context": context, "field": field}
        if value is not None:
            ctx["value"] = str(value)[:100]
        super().__init__(msg, ctx)


class MissingFieldError(DataValidationError):
    """Required attribute missing from an agent record."""

    def __init__(self, field: str, context: str = "agent"):
        super().__init__(
            context=context,
            details="Missing required field",
            field=field
        )
        self.missing = field


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(DiscountEngineError):
    """Invalid or missing configuration."""

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        msg = f"Configuration error for {setting}: {reason}"
        super().__init__(msg, {"setting": setting})
