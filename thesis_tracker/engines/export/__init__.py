"""
Export Engine - roster workbook for administrators.
"""

from thesis_tracker.engines.export.roster_export import (
    RosterExportService,
    build_roster_workbook,
    workbook_bytes,
    XLSX_MIME,
)

__all__ = [
    "RosterExportService",
    "build_roster_workbook",
    "workbook_bytes",
    "XLSX_MIME",
]
