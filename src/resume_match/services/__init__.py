"""Services layer: the simulations and the orchestrator that wires them.

Public API
----------
- :class:`FileValidator` -- media-type allow-list at intake
- :class:`UploadSimulator` -- one progress timer per tracked file
- :class:`StageController` -- the workflow state machine
- :class:`ResultStreamer` -- timed, ordered reveal of result records
- :class:`ConversationSession` -- transcript with delayed replies
- :class:`WorkflowOrchestrator` -- composes all of the above
"""

from resume_match.services.conversation import (
    ChatModelReplyGenerator,
    ConversationSession,
    ReplyGenerator,
    ReplyOutput,
    TemplateReplyGenerator,
)
from resume_match.services.orchestrator import WorkflowOrchestrator
from resume_match.services.stage import StageController
from resume_match.services.streaming import ResultStreamer, RevealState
from resume_match.services.upload import UploadSimulator
from resume_match.services.validation import FileValidator

__all__ = [
    "ChatModelReplyGenerator",
    "ConversationSession",
    "FileValidator",
    "ReplyGenerator",
    "ReplyOutput",
    "ResultStreamer",
    "RevealState",
    "StageController",
    "TemplateReplyGenerator",
    "UploadSimulator",
    "WorkflowOrchestrator",
]
