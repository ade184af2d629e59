"""
Audit sink.

The engine emits audit events for sensitive operations (price overrides,
status changes, cancellations). Persisting them is the sink's concern;
the default sink writes them to the dedicated audit logger.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

from shared.config.constants import AuditSeverity
from shared.config.logging import audit_logger


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """A single audit record."""

    action: str
    details: dict[str, Any]
    severity: AuditSeverity
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AuditSink(Protocol):
    def record(self, action: str, details: dict[str, Any], severity: AuditSeverity) -> None: ...


class LoggingAuditSink:
    """Writes audit events to the ``pos.audit`` logger."""

    _LEVELS = {
        AuditSeverity.LOW: "info",
        AuditSeverity.MEDIUM: "warning",
        AuditSeverity.HIGH: "warning",
    }

    def record(self, action: str, details: dict[str, Any], severity: AuditSeverity) -> None:
        event = AuditEvent(action=action, details=dict(details), severity=severity)
        log_fn = getattr(audit_logger, self._LEVELS.get(severity, "info"))
        log_fn(
            event.action,
            severity=event.severity.value,
            timestamp=event.timestamp.isoformat(),
            **event.details,
        )
