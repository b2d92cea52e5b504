"""
Append-only audit logging.
"""

from thesis_tracker.kernel.events.event_store import EventStore

__all__ = [
    "EventStore",
]
