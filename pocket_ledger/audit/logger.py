"""
Audit Logger

DESIGN DECISION: Every ledger write is logged as a structured event.
This provides:
1. Traceability of every balance and stats mutation
2. Debugging capability when commits fail
3. A record of updates that stopped between their two batches

The audit logger:
- Is async so callers can await it in the same flow as ledger writes
- Gracefully handles failures (never breaks a ledger operation)
- Supports correlation IDs to tie the two halves of an update together
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from pocket_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Writes events to the structured local log. Events are not persisted.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("pocket_ledger.audit")
        # Most recent events, for inspection in tests and debugging
        self.recent_events: deque[AuditEvent] = deque(maxlen=history_size)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

        self.recent_events.append(event)
        return True

    async def log_transaction_applied(
        self,
        user_id: str,
        transaction_id: str,
        signed_amount: str,
        month_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_applied(
            user_id=user_id,
            transaction_id=transaction_id,
            signed_amount=signed_amount,
            month_key=month_key,
            correlation_id=correlation_id,
        ))

    async def log_transaction_reversed(
        self,
        user_id: str,
        transaction_id: str,
        signed_amount: str,
        month_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_reversed(
            user_id=user_id,
            transaction_id=transaction_id,
            signed_amount=signed_amount,
            month_key=month_key,
            correlation_id=correlation_id,
        ))

    async def log_update_started(
        self,
        user_id: str,
        transaction_id: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.update_started(
            user_id=user_id,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    async def log_transaction_updated(
        self,
        user_id: str,
        old_transaction_id: str,
        new_transaction_id: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_updated(
            user_id=user_id,
            old_transaction_id=old_transaction_id,
            new_transaction_id=new_transaction_id,
            correlation_id=correlation_id,
        ))

    async def log_update_partial(
        self,
        user_id: str,
        old_transaction_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.update_partial(
            user_id=user_id,
            old_transaction_id=old_transaction_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        user_id: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            user_id=user_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_commit_failed(
        self,
        user_id: str,
        operation: str,
        error_message: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.commit_failed(
            user_id=user_id,
            operation=operation,
            error_message=error_message,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    async def log_defaults_seeded(self, user_id: str, family: str, count: int) -> None:
        await self.log(AuditEventBuilder.defaults_seeded(user_id, family, count))

    async def log_purge_started(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.purge_started(user_id))

    async def log_purge_completed(self, user_id: str, deleted_counts: dict[str, int]) -> None:
        await self.log(AuditEventBuilder.purge_completed(user_id, deleted_counts))

    async def log_purge_incomplete(
        self,
        user_id: str,
        pending_families: list[str],
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.purge_incomplete(
            user_id=user_id,
            pending_families=pending_families,
            error_message=error_message,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action that spans several writes
    (e.g., a transaction update). Pass it through all subsequent calls.
    """
    return uuid4()
