"""
Fatoura Protocols.

Defines interfaces for external collaborators.
"""

from fatoura.protocols.backend import (
    ORDER_ACCESS_DENIED,
    RESOURCES,
    BackendResult,
    PersistenceBackend,
    Resource,
    ResultStatus,
)
from fatoura.protocols.notifier import InvoiceNotifier

__all__ = [
    "ORDER_ACCESS_DENIED",
    "RESOURCES",
    "BackendResult",
    "InvoiceNotifier",
    "PersistenceBackend",
    "Resource",
    "ResultStatus",
]
