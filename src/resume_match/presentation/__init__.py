"""Presentation layer for the resume-match workflow.

Public API
----------
- :class:`WorkflowDashboard` -- Rich-based console rendering of snapshots
- :func:`format_file_size` -- human-readable byte counts
"""

from resume_match.presentation.console import WorkflowDashboard, format_file_size

__all__ = [
    "WorkflowDashboard",
    "format_file_size",
]
