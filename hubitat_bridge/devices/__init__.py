"""
Device model and state synchronization.

This package provides:
- Data model for hub devices and normalized capability state
- Classification of hub devices into driver types
- Per-device reconciliation of polls, webhooks and commands

Runtimes and the device manager live in the drivers, runtime and manager
modules and are imported from there.
"""

from .classifier import classify
from .models import (
    ActionResult,
    Attribute,
    ButtonEvent,
    CapabilityKey,
    CapabilityState,
    DeviceDescriptor,
    DriverType,
    ObservationSource,
    ReconcileOutcome,
)

__all__ = [
    # Model
    "ActionResult",
    "Attribute",
    "ButtonEvent",
    "CapabilityKey",
    "CapabilityState",
    "DeviceDescriptor",
    "DriverType",
    "ObservationSource",
    "ReconcileOutcome",
    # Classification
    "classify",
]
