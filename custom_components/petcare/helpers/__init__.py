# File: helpers/__init__.py
"""Home Assistant-bound helper functions for PetCare.

Submodules:
    - event_helpers: Entry-scoped dispatcher signal names
    - flow_helpers: Config/options flow schemas, validators and builders

Usage:
    from .helpers.event_helpers import get_event_signal
    from .helpers import flow_helpers as fh
"""

from . import event_helpers, flow_helpers

__all__ = [
    "event_helpers",
    "flow_helpers",
]
