"""Audit trail for booking actions."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.admin import AuditLog


class AuditService:
    """Append-only audit entries, written in the caller's transaction."""

    ACTIONS = {
        "booking.created",
        "booking.status_updated",
        "booking.cancelled",
        "booking_rules.updated",
    }

    async def log(
        self,
        db: AsyncSession,
        user_id: UUID | None,
        action: str,
        entity: str,
        entity_id: Any,
        changes: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Add an audit entry to the session.

        Args:
            db: Database session
            user_id: User performing the action
            action: Action name (e.g., "booking.status_updated")
            entity: Entity type (e.g., "Booking")
            entity_id: Entity identifier
            changes: JSON-serializable description of the change

        Returns:
            The pending audit log entry
        """
        if action not in self.ACTIONS:
            raise ValueError(f"Unknown audit action: {action}")

        entry = AuditLog(
            user_id=user_id,
            action=action,
            entity=entity,
            entity_id=str(entity_id) if entity_id is not None else None,
            changes=changes,
        )
        db.add(entry)
        return entry

    async def log_status_change(
        self,
        db: AsyncSession,
        user_id: UUID,
        booking_id: UUID,
        old_status: str,
        new_status: str,
        timestamp: str,
    ) -> AuditLog:
        """Log a kitchen status update."""
        return await self.log(
            db,
            user_id=user_id,
            action="booking.status_updated",
            entity="Booking",
            entity_id=booking_id,
            changes={
                "old_status": old_status,
                "new_status": new_status,
                "timestamp": timestamp,
            },
        )


audit_service = AuditService()
