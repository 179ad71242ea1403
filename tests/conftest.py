"""Shared fixtures for the resume-match test suite."""

from __future__ import annotations

import pytest

from resume_match.domain.values import FileDescriptor, ResultRecord
from resume_match.infrastructure.catalog import StaticResultSource
from resume_match.infrastructure.config import WorkflowConfig
from resume_match.infrastructure.event_bus import EventBus, EventStore
from resume_match.infrastructure.scheduling import VirtualScheduler
from resume_match.services.orchestrator import WorkflowOrchestrator

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PNG = "image/png"

# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> VirtualScheduler:
    """A virtual clock starting at t=0."""
    return VirtualScheduler()


@pytest.fixture
def config() -> WorkflowConfig:
    """The reference timings (200 / 800 / 1000 / 1000)."""
    return WorkflowConfig()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def store(bus: EventBus) -> EventStore:
    """An event store recording everything published on ``bus``."""
    store = EventStore()
    bus.subscribe_all(store.append)
    return store


# ---------------------------------------------------------------------------
# Value-object fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def pdf() -> FileDescriptor:
    return FileDescriptor(name="resume.pdf", size=245_760, media_type=PDF)


@pytest.fixture
def docx() -> FileDescriptor:
    return FileDescriptor(name="resume.docx", size=51_200, media_type=DOCX)


@pytest.fixture
def png() -> FileDescriptor:
    return FileDescriptor(name="photo.png", size=1_024, media_type=PNG)


@pytest.fixture
def three_records() -> list[ResultRecord]:
    return [
        ResultRecord(record_id=str(i), title=f"Job {i}", company=f"Co {i}",
                     location="Remote", salary="$1k - $2k")
        for i in range(1, 4)
    ]


# ---------------------------------------------------------------------------
# Workflow fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def workflow(clock: VirtualScheduler, bus: EventBus) -> WorkflowOrchestrator:
    """A workflow over the default 8-record catalog."""
    return WorkflowOrchestrator(clock, StaticResultSource(), event_bus=bus, workflow_id="wf-1")

