"""
Audit Models for Kegelbuch

Every mutation of the ledger is logged for audit purposes.
This provides:
1. Traceability of who-owes-what changes during an evening
2. Debugging information when a write fails
3. A record of imports that replaced the stored data

DESIGN DECISION: Audit events go to the structured log only.
They are never stored inside the ledger files, so a backup
contains exactly the bowling data and nothing else.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


DESCRIPTION_MAX_LENGTH = 500


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every store mutation has its own event type.
    """
    # Evenings
    EVENING_CREATED = "evening_created"
    EVENING_UPDATED = "evening_updated"
    EVENING_SELECTED = "evening_selected"

    # Roster of an evening
    PLAYER_ADDED = "player_added"
    PLAYER_UPDATED = "player_updated"
    PLAYER_REMOVED = "player_removed"
    PENALTY_COUNT_SET = "penalty_count_set"
    GAME_RESULT_SET = "game_result_set"

    # Fee schedule
    CONFIGURATION_UPDATED = "configuration_updated"
    PENALTY_ADDED = "penalty_added"
    PENALTY_REMOVED = "penalty_removed"
    GAME_TYPE_ADDED = "game_type_added"
    GAME_TYPE_REMOVED = "game_type_removed"
    DUPLICATE_ID_REJECTED = "duplicate_id_rejected"

    # Saved players
    SAVED_PLAYER_ADDED = "saved_player_added"
    SAVED_PLAYER_REMOVED = "saved_player_removed"

    # Persistence
    DATA_LOADED = "data_loaded"
    SAVE_FAILED = "save_failed"
    DATA_CLEARED = "data_cleared"

    # Snapshots
    SNAPSHOT_EXPORTED = "snapshot_exported"
    SNAPSHOT_IMPORTED = "snapshot_imported"
    SNAPSHOT_IMPORT_FAILED = "snapshot_import_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'evening', 'player', 'penalty')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity (UUID for evenings/players, slug for penalties)"
    )

    description: str = Field(
        ...,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Human-readable description of what happened"
    )

    # Additional data (event-specific)
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=True,
        description="Was this triggered by a user action?"
    )

    @field_validator("description", mode="before")
    @classmethod
    def shorten_description(cls, v: Any) -> Any:
        """Names and labels are user input of any length; cut, never reject."""
        if isinstance(v, str) and len(v) > DESCRIPTION_MAX_LENGTH:
            return v[: DESCRIPTION_MAX_LENGTH - 3] + "..."
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.evening_created(evening_id, evening_date)
        event = AuditEventBuilder.save_failed("evenings", "disk full")
    """

    @staticmethod
    def evening_created(evening_id: UUID, evening_date: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENING_CREATED,
            entity_type="evening",
            entity_id=str(evening_id),
            description=f"Evening created for {evening_date}",
            details={"date": evening_date},
        )

    @staticmethod
    def evening_updated(evening_id: UUID, field: str, value: Any) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EVENING_UPDATED,
            entity_type="evening",
            entity_id=str(evening_id),
            description=f"Evening field updated: {field}",
            details={"field": field, "value": value},
        )

    @staticmethod
    def player_added(evening_id: UUID, player_id: UUID, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAYER_ADDED,
            entity_type="player",
            entity_id=str(player_id),
            description=f"Player added: {name or '(unnamed)'}",
            details={"evening_id": str(evening_id), "name": name},
        )

    @staticmethod
    def player_removed(evening_id: UUID, player_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PLAYER_REMOVED,
            entity_type="player",
            entity_id=str(player_id),
            description="Player removed from evening",
            details={"evening_id": str(evening_id)},
        )

    @staticmethod
    def penalty_count_set(
        evening_id: UUID,
        player_id: UUID,
        penalty_id: str,
        raw_value: Any,
        count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PENALTY_COUNT_SET,
            entity_type="player",
            entity_id=str(player_id),
            description=f"Penalty count set: {penalty_id} = {count}",
            details={
                "evening_id": str(evening_id),
                "penalty_id": penalty_id,
                "raw_value": str(raw_value),
                "count": count,
                "coerced": str(raw_value).strip() != str(count),
            },
        )

    @staticmethod
    def penalty_added(penalty_id: str, label: str, unit_price: float, inverted: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PENALTY_ADDED,
            entity_type="penalty",
            entity_id=penalty_id,
            description=f"Penalty added: {label}",
            details={"unit_price": unit_price, "inverted": inverted},
        )

    @staticmethod
    def duplicate_id_rejected(kind: str, derived_id: str, label: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_ID_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=kind,
            entity_id=derived_id,
            description=f"Rejected {kind} '{label}': id '{derived_id}' already exists",
            details={"label": label},
        )

    @staticmethod
    def configuration_updated(field: str, value: Any, target_id: Optional[str] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIGURATION_UPDATED,
            entity_type="configuration",
            entity_id=target_id,
            description=f"Configuration updated: {field}",
            details={"field": field, "value": value},
        )

    @staticmethod
    def save_failed(store: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=store,
            description=f"Could not persist {store}",
            error_message=error_message,
            is_user_action=False,
        )

    @staticmethod
    def snapshot_imported(sections: list[str], format_version: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_IMPORTED,
            entity_type="snapshot",
            description=f"Snapshot imported ({', '.join(sections) or 'no sections'})",
            details={"sections": sections, "format_version": format_version},
        )

    @staticmethod
    def snapshot_import_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="snapshot",
            description="Snapshot import failed",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            is_user_action=False,
        )
