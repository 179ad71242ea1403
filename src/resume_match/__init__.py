"""resume-match.

Staged resume-matching workflow: simulated uploads, a timed reveal of
matching jobs, and an assistant chat over the results.
"""

__version__ = "0.1.0"

from resume_match.infrastructure.scheduling import AsyncioScheduler, VirtualScheduler
from resume_match.services.orchestrator import WorkflowOrchestrator

__all__ = [
    "AsyncioScheduler",
    "VirtualScheduler",
    "WorkflowOrchestrator",
]
