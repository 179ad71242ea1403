"""Result catalog: the ordered source of job listings revealed to the user.

The core treats the catalog as read-only and consumes it in full, in order,
once per entry into the revealing stage.  ``DEFAULT_RECORDS`` is the
reference configuration of eight listings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from resume_match.domain.values import ResultRecord


class ResultSource(ABC):
    """An ordered, externally supplied list of result records."""

    @abstractmethod
    def records(self) -> Sequence[ResultRecord]:
        """Return the records in reveal order."""

    def __len__(self) -> int:
        return len(self.records())


class StaticResultSource(ResultSource):
    """A fixed in-memory catalog."""

    def __init__(self, records: Iterable[ResultRecord] | None = None) -> None:
        self._records: tuple[ResultRecord, ...] = (
            tuple(records) if records is not None else DEFAULT_RECORDS
        )

    def records(self) -> Sequence[ResultRecord]:
        return self._records

    def __repr__(self) -> str:
        return f"StaticResultSource(records={len(self._records)})"


DEFAULT_RECORDS: tuple[ResultRecord, ...] = (
    ResultRecord(
        record_id="1",
        title="Senior Software Engineer",
        company="TechCorp Inc.",
        location="San Francisco, CA",
        salary="$120k - $180k",
        description="We are looking for a senior software engineer to join our growing team.",
        requirements=("5+ years experience", "React/Node.js", "AWS/Cloud platforms"),
        posted="2 days ago",
    ),
    ResultRecord(
        record_id="2",
        title="Frontend Developer",
        company="Digital Solutions",
        location="Remote",
        salary="$80k - $120k",
        description="Join our remote team to build beautiful and responsive user interfaces.",
        requirements=("3+ years experience", "React/Vue.js", "TypeScript"),
        posted="1 day ago",
    ),
    ResultRecord(
        record_id="3",
        title="Full Stack Developer",
        company="Startup Innovations",
        location="New York, NY",
        salary="$90k - $140k",
        description="Be part of an exciting startup building productivity tools.",
        requirements=("JavaScript/TypeScript", "React/Node.js", "Database design"),
        posted="3 days ago",
    ),
    ResultRecord(
        record_id="4",
        title="React Developer",
        company="WebFlow Systems",
        location="Austin, TX",
        salary="$75k - $110k",
        description="Build modern web applications with React and TypeScript.",
        requirements=("React expertise", "TypeScript", "REST APIs"),
        posted="1 day ago",
    ),
    ResultRecord(
        record_id="5",
        title="Backend Engineer",
        company="DataTech Corp",
        location="Seattle, WA",
        salary="$100k - $150k",
        description="Design and implement scalable backend systems.",
        requirements=("Node.js/Python", "Databases", "Microservices"),
        posted="4 days ago",
    ),
    ResultRecord(
        record_id="6",
        title="DevOps Engineer",
        company="CloudFirst Inc",
        location="Remote",
        salary="$95k - $135k",
        description="Manage cloud infrastructure and deployment pipelines.",
        requirements=("AWS/Azure", "Docker/Kubernetes", "CI/CD"),
        posted="2 days ago",
    ),
    ResultRecord(
        record_id="7",
        title="UI/UX Developer",
        company="Design Studios",
        location="Los Angeles, CA",
        salary="$70k - $105k",
        description="Create beautiful and intuitive user experiences.",
        requirements=("UI/UX design", "Figma/Sketch", "Frontend skills"),
        posted="5 days ago",
    ),
    ResultRecord(
        record_id="8",
        title="Mobile Developer",
        company="AppTech Solutions",
        location="Chicago, IL",
        salary="$85k - $125k",
        description="Develop cross-platform mobile applications.",
        requirements=("React Native", "iOS/Android", "Mobile UI"),
        posted="3 days ago",
    ),
)
