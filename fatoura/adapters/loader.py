"""
Adapter loading.

Resolves the configured persistence backend and invoice notifier from
settings and caches one instance of each.

Settings:
    FATOURA = {
        "BACKEND": "fatoura.adapters.orm.DjangoBackend",
        "NOTIFIER": "fatoura.adapters.noop.LoggingNotifier",
    }
"""

from __future__ import annotations

import logging
import threading

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from fatoura.conf import fatoura_settings
from fatoura.protocols.backend import PersistenceBackend
from fatoura.protocols.notifier import InvoiceNotifier

logger = logging.getLogger(__name__)


# Cached instances
_lock = threading.Lock()
_backend: PersistenceBackend | None = None
_notifier: InvoiceNotifier | None = None


def _load(setting: str, path: str):
    if not path:
        raise ImproperlyConfigured(f"FATOURA['{setting}'] must be configured.")
    try:
        instance = import_string(path)()
    except ImportError as e:
        raise ImproperlyConfigured(f"Failed to import {setting.lower()} '{path}': {e}") from e
    logger.debug("Loaded %s: %s", setting.lower(), path)
    return instance


def get_backend() -> PersistenceBackend:
    """
    Return the configured persistence backend.

    Raises:
        ImproperlyConfigured: If BACKEND is empty or import fails
    """
    global _backend

    if _backend is None:
        with _lock:
            if _backend is None:  # double-checked
                _backend = _load("BACKEND", fatoura_settings.BACKEND)
    return _backend


def reset_backend() -> None:
    """Reset the cached backend. Useful for testing."""
    global _backend
    _backend = None


def get_notifier() -> InvoiceNotifier:
    """
    Return the configured invoice notifier.

    Raises:
        ImproperlyConfigured: If NOTIFIER is empty or import fails
    """
    global _notifier

    if _notifier is None:
        with _lock:
            if _notifier is None:  # double-checked
                _notifier = _load("NOTIFIER", fatoura_settings.NOTIFIER)
    return _notifier


def reset_notifier() -> None:
    """Reset the cached notifier. Useful for testing."""
    global _notifier
    _notifier = None
