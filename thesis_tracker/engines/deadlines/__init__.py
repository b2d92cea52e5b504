"""
Deadline Engine - per-phase submission deadlines.
"""

from thesis_tracker.engines.deadlines.deadline_service import (
    DeadlineService,
    closing_instant,
    parse_deadline_date,
)

__all__ = [
    "DeadlineService",
    "closing_instant",
    "parse_deadline_date",
]
