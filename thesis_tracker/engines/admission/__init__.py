"""
Admission Engine - deadline-gated submissions and their retrieval.
"""

from thesis_tracker.engines.admission.submission_service import (
    SubmissionService,
    IncomingFile,
)

__all__ = [
    "SubmissionService",
    "IncomingFile",
]
