"""Serialization utilities for the resume-match workflow.

Provides ``to_dict`` / ``from_dict`` conversion for result records and
``to_dict`` projections of snapshots and domain events, plus JSON, JSON Lines
and YAML helpers.

Every ``to_dict`` output is JSON-serializable (enums become their values,
tuples become lists).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import fields
from enum import Enum
from typing import Any

import yaml

from resume_match.domain.events import DomainEvent
from resume_match.domain.values import (
    FileSnapshot,
    ResultRecord,
    RevealSnapshot,
    Turn,
    WorkflowSnapshot,
)

logger = logging.getLogger(__name__)


# =========================================================================== #
#  Result records                                                              #
# =========================================================================== #

def record_to_dict(record: ResultRecord) -> dict[str, Any]:
    return {
        "id": record.record_id,
        "title": record.title,
        "company": record.company,
        "location": record.location,
        "salary": record.salary,
        "type": record.employment_type,
        "description": record.description,
        "requirements": list(record.requirements),
        "posted": record.posted,
    }


def record_from_dict(data: dict[str, Any]) -> ResultRecord:
    """Rebuild a record.  ``id`` and ``title`` are required."""
    try:
        record_id = str(data["id"])
        title = str(data["title"])
    except KeyError as exc:
        raise ValueError(f"Result record is missing field {exc.args[0]!r}") from exc
    return ResultRecord(
        record_id=record_id,
        title=title,
        company=str(data.get("company", "")),
        location=str(data.get("location", "")),
        salary=str(data.get("salary", "")),
        employment_type=str(data.get("type", "Full-time")),
        description=str(data.get("description", "")),
        requirements=tuple(str(r) for r in data.get("requirements", ())),
        posted=str(data.get("posted", "")),
    )


def load_records_json(json_str: str) -> list[ResultRecord]:
    """Parse a JSON array of records (the catalog format)."""
    raw = json.loads(json_str)
    if not isinstance(raw, list):
        raise ValueError("Catalog JSON must be an array of records")
    return [record_from_dict(item) for item in raw]


# =========================================================================== #
#  Snapshots                                                                   #
# =========================================================================== #

def file_snapshot_to_dict(snap: FileSnapshot) -> dict[str, Any]:
    return {
        "id": snap.file_id,
        "name": snap.name,
        "size": snap.size,
        "type": snap.media_type,
        "progress": snap.progress,
        "status": snap.status.value,
        "failure_reason": snap.failure_reason,
    }


def reveal_snapshot_to_dict(snap: RevealSnapshot) -> dict[str, Any]:
    return {
        "records": [record_to_dict(r) for r in snap.records],
        "streaming": snap.streaming,
        "pending_slots": snap.pending_slots,
    }


def turn_to_dict(turn: Turn) -> dict[str, Any]:
    return {
        "id": turn.turn_id,
        "author": turn.author.value,
        "content": turn.content,
        "created_at": turn.created_at,
    }


def snapshot_to_dict(snap: WorkflowSnapshot) -> dict[str, Any]:
    return {
        "workflow_id": snap.workflow_id,
        "stage": snap.stage.value,
        "files": [file_snapshot_to_dict(f) for f in snap.files],
        "reveal": reveal_snapshot_to_dict(snap.reveal),
        "transcript": [turn_to_dict(t) for t in snap.transcript],
    }


# =========================================================================== #
#  Events                                                                      #
# =========================================================================== #

def event_to_dict(event: DomainEvent) -> dict[str, Any]:
    """Flatten an event into ``type``, ``source_id``, ``timestamp`` and its
    payload fields.
    """
    data: dict[str, Any] = {
        "type": type(event).__name__,
        "source_id": event.source_id,
        "timestamp": event.timestamp,
    }
    for f in fields(event):
        if f.name in data:
            continue
        value = getattr(event, f.name)
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, ResultRecord):
            value = record_to_dict(value)
        elif isinstance(value, Turn):
            value = turn_to_dict(value)
        data[f.name] = value
    return data


def events_to_jsonl(events: Iterable[DomainEvent]) -> str:
    """One JSON object per line, in the given order."""
    return "".join(json.dumps(event_to_dict(e)) + "\n" for e in events)


# =========================================================================== #
#  Text formats                                                                #
# =========================================================================== #

def to_json(snap: WorkflowSnapshot, indent: int | None = 2) -> str:
    return json.dumps(snapshot_to_dict(snap), indent=indent)


def to_yaml(snap: WorkflowSnapshot) -> str:
    return yaml.safe_dump(snapshot_to_dict(snap), sort_keys=False)
