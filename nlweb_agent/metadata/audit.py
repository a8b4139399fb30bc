from __future__ import annotations

"""Audit event records and hashing utilities."""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

audit_logger = logging.getLogger("nlweb_agent.audit")


@dataclass(frozen=True)
class AuditEvent:
    """Audit event payload captured during request processing."""
    event_type: str
    status: str
    actor: str = "anonymous"
    detail: dict[str, Any] | None = None
    security: bool = False


def record_event(event: AuditEvent) -> None:
    """Emit an audit event; security events are logged as warnings."""
    payload = {
        "audit_event": event.event_type,
        "status": event.status,
        "actor": event.actor,
        "detail": event.detail or {},
        "recorded_at": datetime.now(timezone.utc).isoformat(),
    }
    if event.security:
        payload["severity"] = "high"
        audit_logger.warning("security_event", extra=payload)
        return
    audit_logger.info("audit_event", extra=payload)


def hash_actor(identifier: str | None) -> str:
    """Hash a user or session identifier into a short actor token."""
    if not identifier:
        return "anonymous"
    digest = hashlib.sha256(identifier.encode("utf-8")).hexdigest()
    return digest[:12]
