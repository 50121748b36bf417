"""Audit logging for compliance tracking.

Audit records go to the dedicated ``dossier.audit`` logger so they can be
routed separately from operational logs. Searched names are never written;
a short digest stands in for them.
"""

import hashlib
import logging
from datetime import datetime, timezone
from typing import Any

from dossier.models import PersonSearchInput

audit_logger = logging.getLogger("dossier.audit")


def hash_name(value: str) -> str:
    """Privacy-preserving digest of a searched name (first 12 hex chars of SHA256)."""
    if not value:
        return ""
    return hashlib.sha256(value.encode()).hexdigest()[:12]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLogger:
    """Structured audit events for queries, source access and violations."""

    @staticmethod
    def log_query(
        query: PersonSearchInput,
        sources_queried: list[str],
        result_count: int,
        processing_time_ms: int,
    ) -> None:
        """Record an executed search."""
        record: dict[str, Any] = {
            "type": "query",
            "name_hash": hash_name(query.full_name or ""),
            "aliases_count": len(query.aliases),
            "location": (query.location.country if query.location else None) or "unknown",
            "sources_queried": sources_queried,
            "result_count": result_count,
            "processing_time_ms": processing_time_ms,
            "timestamp": _timestamp(),
        }
        audit_logger.info("Person search executed", extra={"audit": record})

    @staticmethod
    def log_source_access(source_id: str, success: bool, error: str | None = None) -> None:
        """Record a connector call and whether it succeeded."""
        record = {
            "type": "source_access",
            "source_id": source_id,
            "success": success,
            "error": error,
            "timestamp": _timestamp(),
        }
        audit_logger.info(f"Source accessed: {source_id}", extra={"audit": record})

    @staticmethod
    def log_violation(violation_type: str, details: dict[str, Any]) -> None:
        """Record a rejected or non-compliant request."""
        record = {
            "type": "violation",
            "violation_type": violation_type,
            "details": details,
            "timestamp": _timestamp(),
        }
        audit_logger.warning(
            f"Compliance violation detected: {violation_type}", extra={"audit": record}
        )


__all__ = ["AuditLogger", "audit_logger", "hash_name"]
