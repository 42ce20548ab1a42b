from __future__ import annotations

"""Audit trail for searches and uploads."""

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AuditStoreError(RuntimeError):
    """Raised when audit storage fails."""
    pass


@dataclass(frozen=True)
class AuditEvent:
    """Audit event captured while serving a request."""
    event_type: str
    request_id: str
    user_id: str
    actor: str
    status: str
    detail: dict[str, Any] | None = None


class AuditStore:
    """Persist audit events to a SQL database."""
    def __init__(self, connection_uri: str) -> None:
        """Initialize the audit store and ensure the table exists."""
        self._engine = create_engine(connection_uri)
        self._metadata = MetaData()
        self._table = Table(
            "audit_events",
            self._metadata,
            Column("id", String(36), primary_key=True),
            Column("request_id", String(64), nullable=False),
            Column("event_type", String(64), nullable=False),
            Column("user_id", String(128), nullable=False),
            Column("actor", String(128), nullable=False),
            Column("status", String(32), nullable=False),
            Column("detail", Text, nullable=True),
            Column("created_at", DateTime(timezone=True), nullable=False),
        )
        self._metadata.create_all(self._engine)

    def record_event(self, event: AuditEvent) -> None:
        """Insert one audit event row."""
        payload = {
            "id": str(uuid.uuid4()),
            "request_id": event.request_id,
            "event_type": event.event_type,
            "user_id": event.user_id,
            "actor": event.actor,
            "status": event.status,
            "detail": json.dumps(event.detail or {}, ensure_ascii=True, default=str),
            "created_at": datetime.now(timezone.utc),
        }
        try:
            with self._engine.begin() as conn:
                conn.execute(self._table.insert().values(**payload))
        except SQLAlchemyError as exc:
            logger.error(
                "audit_write_failed",
                extra={"event_type": event.event_type, "detail": type(exc).__name__},
            )
            raise AuditStoreError(f"Failed to record audit event: {type(exc).__name__}") from exc


def hash_actor(api_key: str | None) -> str:
    """Hash an API key into a short actor token for audit logs."""
    if not api_key:
        return "anonymous"
    digest = hashlib.sha256(api_key.encode("utf-8")).hexdigest()
    return digest[:12]
