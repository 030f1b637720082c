"""
Store Base Class

DESIGN DECISION: A failed write never touches the in-memory state.
The mutation has already happened and stays applied; the failure is
audited and reported in the OperationResult. The next successful
persist writes the full blob again, so nothing is lost for good
unless the session ends first.
"""

from abc import ABC, abstractmethod
from typing import Optional

from kegelbuch.audit import AuditLogger, get_logger
from kegelbuch.models.audit import AuditEvent
from kegelbuch.models.ledger import OperationResult
from kegelbuch.services.storage import LedgerStorageInterface, StorageError


class PersistingStore(ABC):
    """Common persist/audit plumbing for the ledger stores."""

    store_name = "store"

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._logger = get_logger(f"kegelbuch.stores.{self.store_name}")

    @abstractmethod
    def _save(self) -> None:
        """Write the full blob. May raise StorageError."""
        pass

    def persist(self) -> bool:
        """
        Persist the current state.

        Returns True on success, False if the storage rejected the write.
        Never raises.
        """
        try:
            self._save()
        except StorageError as e:
            self._logger.error("persist_failed", store=self.store_name, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_save_failed(self.store_name, str(e))
            return False
        return True

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _committed(
        self,
        event: Optional[AuditEvent] = None,
        entity_id: Optional[str] = None,
        message: str = "",
    ) -> OperationResult:
        """Audit a finished mutation, persist, and report the outcome."""
        if event is not None:
            self._audit(event)
        persisted = self.persist()
        if not persisted:
            message = f"Saved in memory only: could not write {self.store_name}"
        return OperationResult(
            success=True,
            persisted=persisted,
            message=message,
            error_code=None if persisted else "storage_write_error",
            entity_id=entity_id,
        )

    @staticmethod
    def _not_found(what: str, identifier: object) -> OperationResult:
        return OperationResult(
            success=False,
            message=f"{what} not found: {identifier}",
            error_code="not_found",
            entity_id=str(identifier),
        )
