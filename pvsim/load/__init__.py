"""Daily load templates and self-consumption ratios."""

from .load_model import (
    available_profiles,
    daily_load_profile,
    daily_pv_profile,
    self_consumption_ratio,
    self_sufficiency_ratio,
)

__all__ = [
    "available_profiles",
    "daily_load_profile",
    "daily_pv_profile",
    "self_consumption_ratio",
    "self_sufficiency_ratio",
]
