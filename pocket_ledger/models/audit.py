"""
Audit Models for Pocket Ledger

Every ledger write emits an audit event to the structured log.
This provides:
1. Traceability of every balance and stats mutation
2. Debugging information when a commit fails
3. A visible marker when an update leaves its two-step window open

DESIGN DECISION: Events go to the local structured log only.
They are not persisted and cannot be replayed.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger writes
    TRANSACTION_APPLIED = "transaction_applied"
    TRANSACTION_REVERSED = "transaction_reversed"
    TRANSACTION_UPDATE_STARTED = "transaction_update_started"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_UPDATE_PARTIAL = "transaction_update_partial"

    # Rejections and failures
    VALIDATION_FAILED = "validation_failed"
    COMMIT_FAILED = "commit_failed"

    # Account lifecycle
    DEFAULTS_SEEDED = "defaults_seeded"
    PURGE_STARTED = "purge_started"
    PURGE_COMPLETED = "purge_completed"
    PURGE_INCOMPLETE = "purge_incomplete"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the ledger's log trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - which user and record is this about?
    user_id: Optional[str] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'account')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Store document ID of the entity"
    )

    # Correlation - ties the reverse and apply halves of an update together
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_applied(user_id, txn_id, ...)
        event = AuditEventBuilder.commit_failed(user_id, "apply", str(exc))
    """

    @staticmethod
    def transaction_applied(
        user_id: str,
        transaction_id: str,
        signed_amount: str,
        month_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_APPLIED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction applied: {signed_amount} in {month_key}",
            details={
                "signed_amount": signed_amount,
                "month_key": month_key,
            },
        )

    @staticmethod
    def transaction_reversed(
        user_id: str,
        transaction_id: str,
        signed_amount: str,
        month_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REVERSED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction reversed: {signed_amount} in {month_key}",
            details={
                "signed_amount": signed_amount,
                "month_key": month_key,
            },
        )

    @staticmethod
    def update_started(
        user_id: str,
        transaction_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATE_STARTED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction update started (reverse, then apply)",
        )

    @staticmethod
    def transaction_updated(
        user_id: str,
        old_transaction_id: str,
        new_transaction_id: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            user_id=user_id,
            entity_type="transaction",
            entity_id=new_transaction_id,
            correlation_id=correlation_id,
            description="Transaction replaced by a new entry",
            details={
                "old_transaction_id": old_transaction_id,
            },
        )

    @staticmethod
    def update_partial(
        user_id: str,
        old_transaction_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATE_PARTIAL,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="transaction",
            entity_id=old_transaction_id,
            correlation_id=correlation_id,
            description="Old transaction reversed but replacement was not applied",
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(
        user_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="draft",
            correlation_id=correlation_id,
            description=f"Draft rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def commit_failed(
        user_id: str,
        operation: str,
        error_message: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMMIT_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="transaction",
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Ledger batch failed to commit during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def defaults_seeded(
        user_id: str,
        family: str,
        count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFAULTS_SEEDED,
            user_id=user_id,
            entity_type=family,
            description=f"Seeded {count} default {family}",
            details={
                "count": count,
            },
        )

    @staticmethod
    def purge_started(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PURGE_STARTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="Deleting all ledger data for user",
        )

    @staticmethod
    def purge_completed(
        user_id: str,
        deleted_counts: dict[str, int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PURGE_COMPLETED,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"Deleted {sum(deleted_counts.values())} documents",
            details={
                "deleted_counts": deleted_counts,
            },
        )

    @staticmethod
    def purge_incomplete(
        user_id: str,
        pending_families: list[str],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PURGE_INCOMPLETE,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description="Purge stopped before every family was empty",
            error_message=error_message,
            details={
                "pending_families": pending_families,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
