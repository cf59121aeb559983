"""
Click queue module.

Detached click increments run on a bounded in-process queue served by a
fixed pool of worker tasks.
"""

from .dispatcher import ClickDispatcher
from .models import ClickEvent

__all__ = [
    "ClickDispatcher",
    "ClickEvent",
]
