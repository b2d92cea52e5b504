"""
Deadline schemas.

Deadlines travel as a JSON object keyed by phase number. A value is an ISO
date, or a list of ISO dates when the phase is split into sub-phases, e.g.
``{"1": "2025-01-01", "2": ["2025-02-01", "2025-02-15"]}``.
"""

from typing import Dict, List, Union


DeadlineValue = Union[str, List[str]]

# Upsert request body
DeadlineEntries = Dict[str, DeadlineValue]

# Phase -> ISO dates ordered by sub-phase
DeadlineMap = Dict[int, List[str]]
