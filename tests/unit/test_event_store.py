"""Unit tests for the audit event store."""

import uuid
from datetime import date

import pytest
from sqlalchemy import select

from thesis_tracker.kernel.events.event_store import EventStore
from thesis_tracker.kernel.models import EventLog, EventType


@pytest.mark.asyncio
async def test_log_serializes_payload(db_session):
    thesis_id = uuid.uuid4()
    await EventStore(db_session).log(
        event_type=EventType.COMMENT_ADDED,
        entity_type="comment",
        entity_id=uuid.uuid4(),
        payload={"thesis_id": thesis_id, "on": date(2025, 1, 1), "ids": [thesis_id]},
        ip_address="10.0.0.1",
    )
    await db_session.flush()

    event = (await db_session.execute(select(EventLog))).scalar_one()
    assert event.payload == {"thesis_id": str(thesis_id), "on": "2025-01-01", "ids": [str(thesis_id)]}
    assert event.ip_address == "10.0.0.1"
    assert event.account_id is None


@pytest.mark.asyncio
async def test_collection_events_have_no_entity(db_session):
    await EventStore(db_session).log(
        event_type=EventType.DEADLINES_UPDATED,
        entity_type="deadline",
        entity_id=None,
    )
    await db_session.flush()

    event = (await db_session.execute(select(EventLog))).scalar_one()
    assert event.entity_id is None
    assert event.payload == {}
    assert not hasattr(event, "user_agent")
