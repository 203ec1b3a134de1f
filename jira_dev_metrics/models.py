"""Record types for Jira Dev Metrics.

Issues, commits, pull requests and board/workflow descriptors are fetched by a
record source and handed to the calculators as read-only records. Calculators
never modify a record in place: they return updated copies built with
`dataclasses.replace`.
"""

import datetime
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .common_constants import SYNTHETIC_STAGES
from .utils import parse_timestamp


@dataclass(frozen=True)
class StageTiming:
    """Time spent by an issue at one stage, in hours."""

    status: str
    time: float = 0
    idle_time: float = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StageTiming":
        return cls(
            status=data["status"],
            time=data.get("time") or 0,
            idle_time=data.get("idle_time") or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "time": self.time, "idle_time": self.idle_time}


@dataclass(frozen=True)
class Issue:
    """An issue together with the stage timings recorded for it.

    `transitions` holds the workflow-stage timings supplied by the record
    source; the transition-time calculators add one entry for each synthetic
    stage (`commits`, `pull request`). `commit_date` is the date of the
    reference commit once commits have been matched.
    """

    key: str
    date: datetime.datetime
    transitions: Tuple[StageTiming, ...] = ()
    commit_date: Optional[datetime.datetime] = None
    status: Optional[str] = None
    issue_type: Optional[str] = None
    closed_at: Optional[datetime.datetime] = None
    sprint: Optional[str] = None
    project: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Issue":
        return cls(
            key=data["key"],
            date=parse_timestamp(data["date"]),
            transitions=tuple(
                StageTiming.from_dict(t) for t in data.get("transitions") or []
            ),
            commit_date=parse_timestamp(data.get("commit_date")),
            status=data.get("status"),
            issue_type=data.get("type"),
            closed_at=parse_timestamp(data.get("closed_at")),
            sprint=data.get("sprint"),
            project=data.get("project"),
        )

    def find_transition(self, status: str) -> Optional[StageTiming]:
        """Return the first timing recorded for `status`, if any."""
        return next((t for t in self.transitions if t.status == status), None)

    def with_stage_timing(self, timing: StageTiming, **changes) -> "Issue":
        """Return a copy of this issue with `timing` appended.

        An existing entry for the same synthetic stage is dropped first, so an
        issue never carries two `commits` or `pull request` timings.
        """
        transitions = self.transitions
        if timing.status in SYNTHETIC_STAGES:
            transitions = tuple(t for t in transitions if t.status != timing.status)
        return replace(self, transitions=transitions + (timing,), **changes)


@dataclass(frozen=True)
class Commit:
    """A commit whose title is expected to mention an issue key."""

    title: str
    date: datetime.datetime
    org: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Commit":
        return cls(
            title=data["title"],
            date=parse_timestamp(data["date"]),
            org=data.get("org"),
        )


@dataclass(frozen=True)
class PullRequest:
    """A pull request whose title is expected to mention an issue key."""

    title: str
    created_at: datetime.datetime
    closed_at: Optional[datetime.datetime] = None
    org: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PullRequest":
        return cls(
            title=data["title"],
            created_at=parse_timestamp(data["created_at"]),
            closed_at=parse_timestamp(data.get("closed_at")),
            org=data.get("org"),
        )


@dataclass(frozen=True)
class StageAverage:
    """Mean time and idle time of one stage across an issue set."""

    status: str
    time: int
    idle_time: int

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "time": self.time, "idle_time": self.idle_time}


@dataclass(frozen=True)
class Project:
    """A project and the source-control organization its code lives in."""

    key: str
    git_org_name: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Project":
        return cls(
            key=data["key"],
            git_org_name=data.get("git_org_name"),
            name=data.get("name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "name": self.name, "git_org_name": self.git_org_name}


@dataclass(frozen=True)
class Board:
    """A board: an optional explicit stage order and its column mapping."""

    id: str
    board_config: Dict[str, List[str]] = field(default_factory=dict)
    transition_order: Optional[List[str]] = None
    project: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Board":
        return cls(
            id=str(data["id"]),
            board_config={
                column: list(stages)
                for column, stages in (data.get("boardConfig") or {}).items()
            },
            transition_order=data.get("transitionOrder"),
            project=data.get("project"),
        )


@dataclass(frozen=True)
class WorkflowStatus:
    """A workflow status, identified by its untranslated name."""

    untranslated_name: str
    status_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowStatus":
        status_id = data.get("statusId")
        return cls(
            untranslated_name=data["untranslatedName"],
            status_id=None if status_id is None else str(status_id),
        )


@dataclass(frozen=True)
class WorkflowCategory:
    """The workflow statuses belonging to one status category."""

    key: str
    workflows: Tuple[WorkflowStatus, ...] = ()
    project: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkflowCategory":
        return cls(
            key=data["key"],
            workflows=tuple(
                WorkflowStatus.from_dict(w) for w in data.get("workflows") or []
            ),
            project=data.get("project"),
        )


@dataclass(frozen=True)
class ProgressOptions:
    """The scope of a dashboard request."""

    project: Optional[str] = None
    board: Optional[str] = None
    since: Optional[datetime.datetime] = None
    until: Optional[datetime.datetime] = None
    sprint: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "ProgressOptions":
        scope = settings.get("scope") or {}
        board = scope.get("board")
        return cls(
            project=scope.get("project"),
            board=None if board is None else str(board),
            since=parse_timestamp(scope.get("since")),
            until=parse_timestamp(scope.get("until")),
            sprint=scope.get("sprint"),
        )
