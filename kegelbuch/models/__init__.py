"""
Data Models Package

This package contains all Pydantic models used in Kegelbuch.
All data read from or written to storage must conform to these schemas.
"""

from kegelbuch.models.ledger import (
    SNAPSHOT_FORMAT_VERSION,
    Configuration,
    Evening,
    GameTypeDefinition,
    LedgerModel,
    OperationResult,
    PenaltyDefinition,
    Player,
    Snapshot,
)
from kegelbuch.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "SNAPSHOT_FORMAT_VERSION",
    "Configuration",
    "Evening",
    "GameTypeDefinition",
    "LedgerModel",
    "OperationResult",
    "PenaltyDefinition",
    "Player",
    "Snapshot",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
