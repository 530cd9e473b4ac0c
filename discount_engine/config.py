"""
Configuration for the discount engine.
All configurable parameters in one place.

Configuration is built once (from a JSON file, Streamlit secrets and the
environment) and then passed around as a frozen object; the engine never
reads module state on its own.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple
import json
import math
import os

import streamlit as st
from dotenv import load_dotenv

from discount_engine.exceptions import ConfigurationError
from discount_engine.logging_config import get_logger
from discount_engine.scoring_config import (
    DEFAULT_MAX_DISCOUNT,
    DEFAULT_MIN_DISCOUNT,
    DEFAULT_NORMALIZATION_CAPS,
    DEFAULT_RESIDUAL_POLICY,
    DEFAULT_WEIGHTS,
    RESIDUAL_POLICIES,
)

# Load .env early for Config defaults
load_dotenv()

logger = get_logger("config")


def _get_config_value(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get config value from Streamlit secrets (priority) or environment."""
    try:
        if hasattr(st, "secrets") and key in st.secrets:
            return str(st.secrets[key])
    except Exception as exc:
        # No secrets.toml outside a Streamlit deployment
        logger.debug(f"Streamlit secrets unavailable for {key}: {exc}")
    return os.getenv(key, default)


def _pick(data: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    """Read a key that may be spelled snake_case or camelCase."""
    if snake in data:
        return data[snake]
    return data.get(camel, default)


def _as_float(value: Any, setting: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(setting, f"expected a number, got {value!r}")


@dataclass(frozen=True)
class AllocationWeights:
    """Relative weights of the composite agent score."""

    performance_score: float = DEFAULT_WEIGHTS["performance_score"]
    seniority_months: float = DEFAULT_WEIGHTS["seniority_months"]
    target_achieved_percent: float = DEFAULT_WEIGHTS["target_achieved_percent"]
    active_clients: float = DEFAULT_WEIGHTS["active_clients"]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AllocationWeights":
        return cls(
            performance_score=_as_float(
                _pick(data, "performance_score", "performanceScore", cls.performance_score),
                "weights.performance_score",
            ),
            seniority_months=_as_float(
                _pick(data, "seniority_months", "seniorityMonths", cls.seniority_months),
                "weights.seniority_months",
            ),
            target_achieved_percent=_as_float(
                _pick(data, "target_achieved_percent", "targetAchievedPercent", cls.target_achieved_percent),
                "weights.target_achieved_percent",
            ),
            active_clients=_as_float(
                _pick(data, "active_clients", "activeClients", cls.active_clients),
                "weights.active_clients",
            ),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "performance_score": self.performance_score,
            "seniority_months": self.seniority_months,
            "target_achieved_percent": self.target_achieved_percent,
            "active_clients": self.active_clients,
        }


@dataclass(frozen=True)
class NormalizationCaps:
    """Ceilings applied to unbounded attributes before normalizing to 0-100."""

    seniority_months: float = DEFAULT_NORMALIZATION_CAPS["seniority_months"]
    active_clients: float = DEFAULT_NORMALIZATION_CAPS["active_clients"]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NormalizationCaps":
        return cls(
            seniority_months=_as_float(
                _pick(data, "seniority_months", "seniorityMonths", cls.seniority_months),
                "normalization_caps.seniority_months",
            ),
            active_clients=_as_float(
                _pick(data, "active_clients", "activeClients", cls.active_clients),
                "normalization_caps.active_clients",
            ),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "seniority_months": self.seniority_months,
            "active_clients": self.active_clients,
        }


@dataclass(frozen=True)
class Config:
    """Main configuration for the allocation engine.

    Per-agent bounds follow one of two conventions: absolute amounts
    (``min_discount`` / ``max_discount``) or fractions of the budget
    (``min_discount_percent`` / ``max_discount_percent``). Both bounds must
    use the same convention; :meth:`validate` rejects a mix. Use
    ``dataclasses.replace(cfg, min_discount=None, max_discount=None,
    min_discount_percent=0.05)`` to switch a default config to percents.
    """

    weights: AllocationWeights = field(default_factory=AllocationWeights)
    normalization_caps: NormalizationCaps = field(default_factory=NormalizationCaps)

    # Bounds
    min_discount: Optional[float] = DEFAULT_MIN_DISCOUNT
    max_discount: Optional[float] = DEFAULT_MAX_DISCOUNT
    min_discount_percent: Optional[float] = None
    max_discount_percent: Optional[float] = None

    # Where rounding residue lands: "first" agent or spread "proportional"ly
    residual_policy: str = DEFAULT_RESIDUAL_POLICY

    def bounds_for(self, budget: float) -> Tuple[float, float]:
        """Resolve the configured bounds into absolute amounts for ``budget``.

        Missing bounds resolve to ``0.0`` (floor) and ``inf`` (ceiling).
        """
        if self.min_discount is not None:
            lower = float(self.min_discount)
        elif self.min_discount_percent is not None:
            lower = float(self.min_discount_percent) * budget
        else:
            lower = 0.0

        if self.max_discount is not None:
            upper = float(self.max_discount)
        elif self.max_discount_percent is not None:
            upper = float(self.max_discount_percent) * budget
        else:
            upper = math.inf
        return lower, upper

    def validate(self) -> "Config":
        """Check configuration preconditions; returns self for chaining."""
        for name, weight in self.weights.to_dict().items():
            if not math.isfinite(weight) or weight < 0:
                raise ConfigurationError(f"weights.{name}", f"must be a finite non-negative number, got {weight}")

        for name, cap in self.normalization_caps.to_dict().items():
            if not math.isfinite(cap) or cap <= 0:
                raise ConfigurationError(f"normalization_caps.{name}", f"must be positive, got {cap}")

        for name in ("min_discount", "max_discount"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigurationError(name, f"must be non-negative, got {value}")
        for name in ("min_discount_percent", "max_discount_percent"):
            value = getattr(self, name)
            if value is not None and not 0.0 <= value <= 1.0:
                raise ConfigurationError(name, f"must be a fraction of the budget in [0, 1], got {value}")

        if self.min_discount is not None and self.min_discount_percent is not None:
            raise ConfigurationError("min_discount", "set either min_discount or min_discount_percent, not both")
        if self.max_discount is not None and self.max_discount_percent is not None:
            raise ConfigurationError("max_discount", "set either max_discount or max_discount_percent, not both")
        uses_absolute = self.min_discount is not None or self.max_discount is not None
        uses_percent = self.min_discount_percent is not None or self.max_discount_percent is not None
        if uses_absolute and uses_percent:
            raise ConfigurationError(
                "min_discount", "bounds must be both absolute amounts or both fractions of the budget"
            )

        if (self.min_discount is not None and self.max_discount is not None
                and self.min_discount > self.max_discount):
            raise ConfigurationError("min_discount", "minimum exceeds maximum")
        if (self.min_discount_percent is not None and self.max_discount_percent is not None
                and self.min_discount_percent > self.max_discount_percent):
            raise ConfigurationError("min_discount_percent", "minimum exceeds maximum")

        if self.residual_policy not in RESIDUAL_POLICIES:
            raise ConfigurationError(
                "residual_policy", f"unknown policy {self.residual_policy!r}, expected one of {RESIDUAL_POLICIES}"
            )
        return self

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "weights": self.weights.to_dict(),
            "normalization_caps": self.normalization_caps.to_dict(),
            "min_discount": self.min_discount,
            "max_discount": self.max_discount,
            "min_discount_percent": self.min_discount_percent,
            "max_discount_percent": self.max_discount_percent,
            "residual_policy": self.residual_policy,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Build a config from a (possibly camelCase) mapping.

        Absolute defaults only fill in when no percent bound is given, so
        ``{"minDiscountPercent": 0.05}`` is a percent-only config with no
        ceiling.
        """
        weights = _pick(data, "weights", "weights", {}) or {}
        caps = _pick(data, "normalization_caps", "normalizationCaps", {}) or {}

        min_abs = _as_float(_pick(data, "min_discount", "minDiscount"), "min_discount")
        min_pct = _as_float(_pick(data, "min_discount_percent", "minDiscountPercent"), "min_discount_percent")
        max_abs = _as_float(_pick(data, "max_discount", "maxDiscount"), "max_discount")
        max_pct = _as_float(_pick(data, "max_discount_percent", "maxDiscountPercent"), "max_discount_percent")
        if min_pct is None and max_pct is None:
            if min_abs is None:
                min_abs = DEFAULT_MIN_DISCOUNT
            if max_abs is None:
                max_abs = DEFAULT_MAX_DISCOUNT

        return cls(
            weights=AllocationWeights.from_dict(weights),
            normalization_caps=NormalizationCaps.from_dict(caps),
            min_discount=min_abs,
            max_discount=max_abs,
            min_discount_percent=min_pct,
            max_discount_percent=max_pct,
            residual_policy=str(_pick(data, "residual_policy", "residualPolicy", DEFAULT_RESIDUAL_POLICY)),
        )


def _apply_env_overrides(cfg: Config) -> Config:
    """Environment / secrets overrides, applied after the file is read."""
    overrides: Dict[str, Any] = {}
    min_discount = _get_config_value("MIN_DISCOUNT")
    if min_discount is not None:
        overrides["min_discount"] = _as_float(min_discount, "MIN_DISCOUNT")
        overrides["min_discount_percent"] = None
    max_discount = _get_config_value("MAX_DISCOUNT")
    if max_discount is not None:
        overrides["max_discount"] = _as_float(max_discount, "MAX_DISCOUNT")
        overrides["max_discount_percent"] = None
    residual_policy = _get_config_value("RESIDUAL_POLICY")
    if residual_policy is not None:
        overrides["residual_policy"] = residual_policy.strip().lower()
    if overrides:
        logger.info(f"Applying configuration overrides: {sorted(overrides)}")
        cfg = replace(cfg, **overrides)
    return cfg


def load_config(path: Optional[str] = None) -> Config:
    """Load and validate the engine configuration.

    Args:
        path: JSON file to read. Falls back to the DISCOUNT_CONFIG_PATH
            setting; without either, built-in defaults are used.

    Returns:
        Validated, frozen Config

    Raises:
        ConfigurationError: unreadable file or invalid values
    """
    path = path or _get_config_value("DISCOUNT_CONFIG_PATH")
    data: Dict[str, Any] = {}
    if path:
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError("DISCOUNT_CONFIG_PATH", f"config file not found: {path}")
        except json.JSONDecodeError as exc:
            raise ConfigurationError("DISCOUNT_CONFIG_PATH", f"invalid JSON in {path}: {exc}")
        if not isinstance(data, dict):
            raise ConfigurationError("DISCOUNT_CONFIG_PATH", f"expected a JSON object in {path}")
        logger.info(f"Loaded discount configuration from {path}")

    cfg = _apply_env_overrides(Config.from_dict(data))
    return cfg.validate()


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached global config (next get_config() reloads)."""
    global _config
    _config = None
