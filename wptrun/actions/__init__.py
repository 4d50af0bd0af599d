"""
Synthetic input for testdriver.js tests.

Validates WebDriver action-sequence payloads and replays them, tick by tick,
against a live page.
"""

from .dispatcher import Actions, BUTTONS
from .models import ActionSequence, Source, SourceType, PointerType

__all__ = [
    "Actions",
    "BUTTONS",
    "ActionSequence",
    "Source",
    "SourceType",
    "PointerType",
]
