"""Configuration dataclasses for the resume-match workflow.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid combinations.  Configs are **frozen** so one
instance can be shared by several workflows without risking silent mutation.

All durations are in scheduler time-units, which the real-time scheduler
interprets as milliseconds.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any

import yaml

DEFAULT_ACCEPTED_MEDIA_TYPES: tuple[str, ...] = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
)


# ===================================================================== #
#  Workflow Configuration                                                #
# ===================================================================== #

@dataclass(frozen=True)
class WorkflowConfig:
    """Timing and intake parameters of one workflow.

    Attributes
    ----------
    progress_interval_ms:
        Delay between two upload progress ticks.
    progress_step:
        Percentage points added per tick.  Must divide 100 for the
        "exactly N ticks" guarantee to hold.
    reveal_interval_ms:
        Delay before each result record is revealed.
    exhaustion_delay_ms:
        Delay between the last reveal and the exhaustion signal.
    reply_delay_ms:
        Simulated latency of each system reply.
    accepted_media_types:
        Allow-list checked by the ``FileValidator``.
    """

    progress_interval_ms: float = 200.0
    progress_step: int = 10
    reveal_interval_ms: float = 800.0
    exhaustion_delay_ms: float = 1000.0
    reply_delay_ms: float = 1000.0
    accepted_media_types: tuple[str, ...] = field(
        default_factory=lambda: DEFAULT_ACCEPTED_MEDIA_TYPES
    )

    def __post_init__(self) -> None:
        # frozen=True prevents normal assignment; JSON/YAML hand us lists.
        if not isinstance(self.accepted_media_types, tuple):
            object.__setattr__(
                self, "accepted_media_types", tuple(self.accepted_media_types)
            )

    @property
    def ticks_to_complete(self) -> int:
        return -(-100 // self.progress_step)

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if self.progress_interval_ms <= 0:
            raise ValueError(
                f"progress_interval_ms must be > 0, got {self.progress_interval_ms}"
            )
        if not (1 <= self.progress_step <= 100):
            raise ValueError(
                f"progress_step must be in [1, 100], got {self.progress_step}"
            )
        if self.reveal_interval_ms <= 0:
            raise ValueError(
                f"reveal_interval_ms must be > 0, got {self.reveal_interval_ms}"
            )
        if self.exhaustion_delay_ms < 0:
            raise ValueError(
                f"exhaustion_delay_ms must be >= 0, got {self.exhaustion_delay_ms}"
            )
        if self.reply_delay_ms < 0:
            raise ValueError(
                f"reply_delay_ms must be >= 0, got {self.reply_delay_ms}"
            )
        if not self.accepted_media_types:
            raise ValueError("accepted_media_types must not be empty")

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["accepted_media_types"] = list(self.accepted_media_types)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Unified config loader                                                 #
# ===================================================================== #

_CONFIG_MAP: dict[str, type] = {
    "workflow": WorkflowConfig,
}


def _load_sections(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError("Top-level config must be a mapping")
    result: dict[str, Any] = {}
    for section, data in raw.items():
        cls = _CONFIG_MAP.get(section)
        if cls is not None and isinstance(data, dict):
            result[section] = cls.from_dict(data)
        else:
            result[section] = data
    return result


def load_config_from_json(json_str: str) -> dict[str, Any]:
    """Parse a JSON string into a dict of typed config objects.

    The JSON is expected to be an object whose top-level keys correspond to
    config section names (``workflow``).  Unknown sections are preserved as
    raw values.
    """
    return _load_sections(json.loads(json_str))


def load_config_from_yaml(yaml_str: str) -> dict[str, Any]:
    """YAML counterpart of :func:`load_config_from_json`."""
    return _load_sections(yaml.safe_load(yaml_str))
