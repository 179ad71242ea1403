"""Intake validation: turns candidate descriptors into tracked files.

Unsupported media types are dropped without surfacing anything to the
workflow.  A ``FileRejected`` event is still published for diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from resume_match.domain.entities import TrackedFile
from resume_match.domain.events import FileRejected
from resume_match.domain.values import FileDescriptor
from resume_match.infrastructure.config import DEFAULT_ACCEPTED_MEDIA_TYPES
from resume_match.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)


class FileValidator:
    """Accepts descriptors whose declared media type is on the allow-list.

    Parameters
    ----------
    accepted_media_types:
        The allow-list.  Defaults to PDF, DOC, DOCX and plain text.
    event_bus:
        Optional bus for ``FileRejected`` diagnostics.
    source_id:
        Stamped on published events.
    """

    def __init__(
        self,
        accepted_media_types: Iterable[str] = DEFAULT_ACCEPTED_MEDIA_TYPES,
        event_bus: EventBus | None = None,
        source_id: str = "",
    ) -> None:
        self._accepted = frozenset(accepted_media_types)
        self._event_bus = event_bus
        self._source_id = source_id

    @property
    def accepted_media_types(self) -> frozenset[str]:
        return self._accepted

    def is_accepted(self, media_type: str) -> bool:
        return media_type in self._accepted

    def validate(self, descriptor: FileDescriptor) -> TrackedFile | None:
        """Return a fresh ``TrackedFile`` or ``None`` when rejected."""
        if not self.is_accepted(descriptor.media_type):
            logger.debug(
                "Dropping %r: unsupported media type %r",
                descriptor.name,
                descriptor.media_type,
            )
            if self._event_bus is not None:
                self._event_bus.publish(FileRejected(
                    source_id=self._source_id,
                    name=descriptor.name,
                    media_type=descriptor.media_type,
                ))
            return None
        return TrackedFile.from_descriptor(descriptor)

    def validate_many(self, descriptors: Iterable[FileDescriptor]) -> list[TrackedFile]:
        """Validate a submission batch, preserving order of the accepted ones."""
        accepted: list[TrackedFile] = []
        for descriptor in descriptors:
            tracked = self.validate(descriptor)
            if tracked is not None:
                accepted.append(tracked)
        return accepted
