"""
Fatoura configuration.

Usage in settings.py:
    FATOURA = {
        "BACKEND": "fatoura.adapters.orm.DjangoBackend",
        "NOTIFIER": "fatoura.adapters.noop.LoggingNotifier",
        "BRAND": "erth",
        "INVOICE_POLL_INTERVAL": 2.0,
    }
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from django.conf import settings


@dataclass
class FatouraSettings:
    """Fatoura configuration settings."""

    # Persistence collaborator (dotted path)
    BACKEND: str = "fatoura.adapters.orm.DjangoBackend"

    # Invoice-ready notifier (dotted path)
    NOTIFIER: str = "fatoura.adapters.noop.LoggingNotifier"

    # Brand tag stamped on order inserts and used to scope order queries
    BRAND: str = "erth"

    # Stitching rate when STITCHING_STANDARD is missing from the price table
    DEFAULT_STITCHING_PRICE: Decimal = Decimal("9")

    # Flat stitching per "design" garment (ignores negotiated overrides)
    DESIGN_STITCHING_PRICE: Decimal = Decimal("9")

    # Style surcharge for "design" garments when STY_DESIGN is missing
    DESIGN_STYLE_PRICE: Decimal = Decimal("6")

    # Invoice polling after completion
    INVOICE_POLL_INTERVAL: float = 2.0
    INVOICE_POLL_MAX_ATTEMPTS: int = 30

    # Thread pool size for per-line stock settlement
    SETTLEMENT_WORKERS: int = 4


def get_fatoura_settings() -> FatouraSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "FATOURA", {})
    return FatouraSettings(**{
        k: v for k, v in user_settings.items()
        if k in FatouraSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_fatoura_settings(), name)


fatoura_settings = _LazySettings()
