"""Record sources for Jira Dev Metrics.

A record source supplies the records the calculators aggregate. Every method
is a coroutine taking the request scope (`ProgressOptions`):

- `project(opts)` -> `Project` or None
- `board(opts)` -> `Board` or None
- `workflows(opts)` -> list of `WorkflowCategory`
- `issues(opts)` -> list of `Issue` active in the scope
- `commits(opts, matcher, org)` -> list of `Commit`
- `pull_requests(opts, matcher, org)` -> list of `PullRequest`

`FileRecordSource` reads exported records from JSON files in a directory.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from .models import Board, Commit, Issue, Project, PullRequest, WorkflowCategory

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """
    Exception raised when records cannot be read from a source.
    """


def _in_scope(value, wanted):
    """A record field is in scope when either side is unset or they are equal."""
    return wanted is None or value is None or str(value) == str(wanted)


def _active_in_range(start, end, opts):
    """True if something that started at `start` and ended at `end` (or is
    still open) overlaps the `since`/`until` range of `opts`.
    """
    if opts.until is not None and start > opts.until:
        return False
    if opts.since is not None and end is not None and end < opts.since:
        return False
    return True


class FileRecordSource:
    """A record source backed by JSON files in a directory.

    The directory holds `projects.json`, `boards.json`, `workflows.json` and
    `issues.json`, and optionally `commits.json` and `pulls.json`. Each file
    contains a list of records and is read once, on first use.
    """

    REQUIRED_FILES = ("projects", "boards", "workflows", "issues")

    def __init__(self, directory: str):
        self.directory = directory
        self._cache: Dict[str, List[Any]] = {}

    def __repr__(self):
        return f"<FileRecordSource directory={self.directory}>"

    def _load(self, name: str, factory) -> List[Any]:
        if name not in self._cache:
            path = os.path.join(self.directory, f"{name}.json")
            try:
                with open(path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            except FileNotFoundError:
                if name in self.REQUIRED_FILES:
                    raise SourceError(f"Record file not found: {path}") from None
                logger.debug("No %s records found at %s", name, path)
                raw = []
            except json.JSONDecodeError as e:
                raise SourceError(
                    f"Failed to parse JSON from record file: {path}. "
                    f"Error at line {e.lineno}, column {e.colno}: {e.msg}"
                ) from e

            if not isinstance(raw, list):
                raise SourceError(f"Record file {path} must contain a list")

            self._cache[name] = [factory(item) for item in raw]
            logger.debug("Loaded %d %s records", len(self._cache[name]), name)
        return self._cache[name]

    async def project(self, opts) -> Optional[Project]:
        return next(
            (
                p
                for p in self._load("projects", Project.from_dict)
                if _in_scope(p.key, opts.project)
            ),
            None,
        )

    async def board(self, opts) -> Optional[Board]:
        return next(
            (
                b
                for b in self._load("boards", Board.from_dict)
                if _in_scope(b.id, opts.board) and _in_scope(b.project, opts.project)
            ),
            None,
        )

    async def workflows(self, opts) -> List[WorkflowCategory]:
        return [
            w
            for w in self._load("workflows", WorkflowCategory.from_dict)
            if _in_scope(w.project, opts.project)
        ]

    async def issues(self, opts) -> List[Issue]:
        return [
            i
            for i in self._load("issues", Issue.from_dict)
            if _in_scope(i.project, opts.project)
            and (opts.sprint is None or i.sprint == opts.sprint)
            and _active_in_range(i.date, i.closed_at, opts)
        ]

    async def commits(self, opts, matcher, org) -> List[Commit]:
        return [
            c
            for c in self._load("commits", Commit.from_dict)
            if _in_scope(c.org, org)
            and _active_in_range(c.date, c.date, opts)
            and matcher.matches(c.title)
        ]

    async def pull_requests(self, opts, matcher, org) -> List[PullRequest]:
        return [
            p
            for p in self._load("pulls", PullRequest.from_dict)
            if _in_scope(p.org, org)
            and _active_in_range(p.created_at, p.closed_at, opts)
            and matcher.matches(p.title)
        ]
