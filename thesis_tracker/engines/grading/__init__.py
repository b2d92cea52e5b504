"""
Grading Engine - student grades and thesis grade history.
"""

from thesis_tracker.engines.grading.grading_service import GradingService, StudentGrade

__all__ = [
    "GradingService",
    "StudentGrade",
]
