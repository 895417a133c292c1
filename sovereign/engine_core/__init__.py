"""
Engine Core - Game state and rule evaluation.

The core holds:
1. ResourceLedger - Money, Food and Power counters
2. CapitalRegistry - Government, Population and Military
3. Evaluator - condition checks and effect application
4. EventHook - subscriber lists used by the session layer
"""

from .resources import Resource, ResourceKind, ResourceLedger
from .capitals import (
    Capital,
    CapitalPreset,
    CapitalRegistry,
    CAPITAL_PRESETS,
    GOVERNMENT,
    POPULATION,
    MILITARY,
)
from .events import EventHook
from .evaluator import (
    is_met,
    is_available,
    available_choices,
    apply_effect,
    apply_choice,
)

__all__ = [
    "Resource",
    "ResourceKind",
    "ResourceLedger",
    "Capital",
    "CapitalPreset",
    "CapitalRegistry",
    "CAPITAL_PRESETS",
    "GOVERNMENT",
    "POPULATION",
    "MILITARY",
    "EventHook",
    "is_met",
    "is_available",
    "available_choices",
    "apply_effect",
    "apply_choice",
]
