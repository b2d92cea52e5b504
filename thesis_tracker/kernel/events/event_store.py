"""
Event Store service for append-only audit logging.

Workflow mutations are logged here before the request transaction commits.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thesis_tracker.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.THESIS_STATUS_CHANGED,
            entity_type="thesis",
            entity_id=thesis.id,
            account_id=actor.id,
            payload={"from_status": "new", "to_status": "for_checking"},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: Optional[uuid.UUID],
        account_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> EventLog:
        """
        Log an event to the immutable audit log.

        Args:
            event_type: The type of event
            entity_type: The type of entity (thesis, submission, comment, ...)
            entity_id: The ID of the entity
            account_id: The acting account (None for system events)
            payload: Additional event data
            ip_address: Client IP address

        Returns:
            The created EventLog record
        """
        if payload:
            payload = self._serialize_payload(payload)

        event = EventLog(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            account_id=account_id,
            payload=payload or {},
            ip_address=ip_address,
        )

        self.session.add(event)
        # Caller's transaction commits it together with the mutation
        return event

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert payload values to JSON-serializable types."""
        return {key: self._serialize_value(value) for key, value in payload.items()}

    def _serialize_value(self, value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, dict):
            return self._serialize_payload(value)
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        return value
