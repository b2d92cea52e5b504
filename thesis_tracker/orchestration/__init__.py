"""Orchestration layer - thesis lifecycle state machine."""

from thesis_tracker.orchestration.state_machine import (
    ThesisStateMachine,
    can_transition,
    valid_transitions,
)
from thesis_tracker.kernel.models.thesis import ThesisStatus

__all__ = [
    "ThesisStateMachine",
    "can_transition",
    "valid_transitions",
    "ThesisStatus",
]
