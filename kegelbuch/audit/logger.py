"""
Audit Logger

DESIGN DECISION: Every mutation of the ledger is logged.
This provides:
1. Traceability of fee and count changes
2. Debugging capability when a write fails
3. A history of imports that replaced stored data

The audit logger:
- Is synchronous (the whole app is single-threaded)
- Gracefully handles failures (never crashes the app if logging fails)
- Writes structured lines via structlog
"""

import logging
import sys

import structlog

from kegelbuch.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def _processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


# Configure structlog for local logging
structlog.configure(
    processors=_processors(json_output=True),
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    (Re)configure logging from settings.

    Called once by the composition root. Routes stdlib logging to stderr
    so structlog's level filter has a level to compare against.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )
    structlog.configure(
        processors=_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "kegelbuch"):
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log. Events are kept in
    memory too (bounded), so the UI and tests can inspect recent history.
    """

    def __init__(self, history_size: int = 200):
        self._logger = get_logger("kegelbuch.audit")
        self._history_size = history_size
        self._history: list[AuditEvent] = []

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, newest last."""
        return list(self._history)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written, False if logging failed.
        Never raises.
        """
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            print(f"Warning: audit logging failed: {e}", file=sys.stderr)
            return False

        return True

    def log_save_failed(self, store: str, error_message: str) -> None:
        """Log a failed persist."""
        self.log(AuditEventBuilder.save_failed(store, error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: dict = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(error_type, error_message, details))
