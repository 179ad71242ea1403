"""Infrastructure layer for the resume-match workflow.

Re-exports the public API surface for convenience::

    from resume_match.infrastructure import (
        EventBus, EventStore,
        VirtualScheduler, AsyncioScheduler,
        WorkflowConfig, StaticResultSource,
    )
"""

from resume_match.infrastructure.catalog import (
    DEFAULT_RECORDS,
    ResultSource,
    StaticResultSource,
)
from resume_match.infrastructure.config import (
    DEFAULT_ACCEPTED_MEDIA_TYPES,
    WorkflowConfig,
    load_config_from_json,
    load_config_from_yaml,
)
from resume_match.infrastructure.event_bus import EventBus, EventStore
from resume_match.infrastructure.scheduling import (
    AsyncioScheduler,
    Scheduler,
    TimerHandle,
    VirtualScheduler,
)
from resume_match.infrastructure.serialization import (
    event_to_dict,
    events_to_jsonl,
    load_records_json,
    record_from_dict,
    record_to_dict,
    snapshot_to_dict,
    to_json,
    to_yaml,
)

__all__ = [
    # Catalog
    "DEFAULT_RECORDS",
    "ResultSource",
    "StaticResultSource",
    # Configuration
    "DEFAULT_ACCEPTED_MEDIA_TYPES",
    "WorkflowConfig",
    "load_config_from_json",
    "load_config_from_yaml",
    # Event bus
    "EventBus",
    "EventStore",
    # Scheduling
    "AsyncioScheduler",
    "Scheduler",
    "TimerHandle",
    "VirtualScheduler",
    # Serialization
    "load_records_json",
    "record_from_dict",
    "record_to_dict",
    "snapshot_to_dict",
    "to_json",
    "to_yaml",
    "event_to_dict",
    "events_to_jsonl",
]
