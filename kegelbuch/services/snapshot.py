"""
Snapshot Export / Import

A snapshot is the whole dataset in one JSON document:

    {
      "evenings": [...],
      "configuration": {...},
      "savedPlayers": [...],
      "exportTimestamp": "2024-03-01T20:15:00+00:00",
      "formatVersion": "1.0"
    }

Import rules:
- The document must be valid JSON matching the schema, otherwise
  ParseError and NOTHING is written
- Each section present in the document replaces the stored section
  (full overwrite); sections absent are left untouched
- formatVersion is kept on the parsed snapshot; it is not interpreted

Failures are returned as OperationResult values, never raised to the UI.
"""

import asyncio
import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from pydantic import ValidationError

from kegelbuch.audit import AuditLogger, get_logger
from kegelbuch.config import get_settings
from kegelbuch.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from kegelbuch.models.ledger import (
    Configuration,
    Evening,
    OperationResult,
    Snapshot,
)
from kegelbuch.services.storage import (
    LedgerStorageInterface,
    ParseError,
    StorageError,
)


Document = Union[str, bytes, dict]


def parse_snapshot(document: Document) -> Snapshot:
    """
    Parse an export document.

    Raises:
        ParseError: If the document is not JSON, not an object,
                    or does not match the snapshot schema
    """
    if isinstance(document, dict):
        data: Any = document
    else:
        try:
            data = json.loads(document)
        except (ValueError, TypeError) as e:
            raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError("Snapshot must be a JSON object")

    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ParseError(
            f"Snapshot does not match the expected format "
            f"({e.error_count()} errors, first at '{location}': {first.get('msg', '')})"
        ) from e


class SnapshotService:
    """
    Builds export documents and applies imported ones to storage.

    The service writes to storage only. Callers that keep the ledger
    in memory (the stores) apply the returned Snapshot themselves.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._logger = get_logger("kegelbuch.snapshot")

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_snapshot(
        self,
        configuration: Configuration,
        evenings: Sequence[Evening],
        saved_players: Sequence[str],
    ) -> Snapshot:
        """Bundle the given state into a timestamped snapshot."""
        snapshot = Snapshot(
            evenings=[e.model_copy(deep=True) for e in evenings],
            configuration=configuration.model_copy(deep=True),
            saved_players=list(saved_players),
            export_timestamp=datetime.now(timezone.utc),
        )
        self._audit(AuditEvent(
            event_type=AuditEventType.SNAPSHOT_EXPORTED,
            entity_type="snapshot",
            description=f"Snapshot exported ({len(snapshot.evenings)} evenings)",
            details={"format_version": snapshot.format_version},
        ))
        return snapshot

    @staticmethod
    def to_json(snapshot: Snapshot) -> str:
        return json.dumps(snapshot.to_document(), ensure_ascii=False, indent=2)

    @staticmethod
    def export_filename(day: Optional[date] = None, prefix: Optional[str] = None) -> str:
        """e.g. kegelbuch_export_2024-03-01.json"""
        day = day or date.today()
        prefix = prefix or get_settings().app.export_prefix
        return f"{prefix}_{day.isoformat()}.json"

    # -------------------------------------------------------------------------
    # Import
    # -------------------------------------------------------------------------

    def import_snapshot(self, document: Document) -> tuple[OperationResult, Optional[Snapshot]]:
        """
        Parse a document and write its sections to storage.

        Returns:
            (result, snapshot). snapshot is None when parsing failed;
            in that case storage was not touched.
        """
        try:
            snapshot = parse_snapshot(document)
        except ParseError as e:
            self._logger.warning("snapshot_parse_failed", error=str(e))
            self._audit(AuditEventBuilder.snapshot_import_failed(str(e)))
            return OperationResult(
                success=False,
                message=f"Import failed: {e}",
                error_code="parse_error",
            ), None

        sections = []
        write_errors = []
        for section, write in (
            ("evenings", lambda: self._storage.save_evenings(snapshot.evenings)),
            ("configuration", lambda: self._storage.save_configuration(snapshot.configuration)),
            ("saved_players", lambda: self._storage.save_saved_players(snapshot.saved_players)),
        ):
            if getattr(snapshot, section) is None:
                continue
            sections.append(section)
            try:
                write()
            except StorageError as e:
                write_errors.append(f"{section}: {e}")

        self._audit(AuditEventBuilder.snapshot_imported(sections, snapshot.format_version))

        if write_errors:
            for error in write_errors:
                self._logger.error("snapshot_write_failed", error=error)
            if self._audit_logger:
                self._audit_logger.log_save_failed("snapshot", "; ".join(write_errors))
            return OperationResult(
                success=True,
                persisted=False,
                message="Imported, but could not save: " + "; ".join(write_errors),
                error_code="storage_write_error",
            ), snapshot

        return OperationResult(
            success=True,
            persisted=True,
            message=f"Import successful ({', '.join(sections) or 'nothing to import'})",
        ), snapshot

    async def import_snapshot_file(
        self,
        path: Union[str, Path],
    ) -> tuple[OperationResult, Optional[Snapshot]]:
        """
        Read a file without blocking the caller, then import it.

        One read, one result. A file that cannot be read is reported
        like a parse failure: nothing is written.
        """
        try:
            document = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._logger.warning("snapshot_read_failed", path=str(path), error=str(e))
            self._audit(AuditEventBuilder.snapshot_import_failed(f"Error reading file: {e}"))
            return OperationResult(
                success=False,
                message=f"Error reading file: {e}",
                error_code="read_error",
            ), None

        return self.import_snapshot(document)
