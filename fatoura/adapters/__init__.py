"""
Fatoura Adapters.

Implementations of protocols for external collaborators.
"""

from fatoura.adapters.loader import (
    get_backend,
    get_notifier,
    reset_backend,
    reset_notifier,
)
from fatoura.adapters.noop import LoggingNotifier, RecordingNotifier

__all__ = [
    "LoggingNotifier",
    "RecordingNotifier",
    "get_backend",
    "get_notifier",
    "reset_backend",
    "reset_notifier",
]
