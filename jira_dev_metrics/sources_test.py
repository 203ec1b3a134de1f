"""Tests for the file record source in Jira Dev Metrics."""

import datetime
import json

import pytest

from .matching import IssueKeyMatcher
from .models import ProgressOptions
from .sources import FileRecordSource, SourceError

RECORDS = {
    "projects": [
        {"key": "PROJ", "name": "Project", "git_org_name": "acme"},
        {"key": "OTHER", "name": "Other", "git_org_name": "other"},
    ],
    "boards": [
        {"id": 1, "project": "PROJ", "transitionOrder": ["open", "commits"]},
        {"id": 2, "project": "OTHER", "boardConfig": {"todo": ["open"]}},
    ],
    "workflows": [
        {
            "key": "indeterminate",
            "project": "PROJ",
            "workflows": [{"untranslatedName": "in progress", "statusId": 3}],
        },
        {"key": "done", "project": "OTHER", "workflows": []},
    ],
    "issues": [
        {
            "key": "PROJ-1",
            "project": "PROJ",
            "date": "2024-01-01T09:00:00Z",
            "closed_at": "2024-01-05T09:00:00Z",
            "sprint": "Sprint 1",
        },
        {
            "key": "PROJ-2",
            "project": "PROJ",
            "date": "2024-02-01T09:00:00Z",
            "sprint": "Sprint 2",
        },
        {"key": "OTHER-1", "project": "OTHER", "date": "2024-01-01T09:00:00Z"},
    ],
    "commits": [
        {"title": "PROJ-1 fix", "date": "2024-01-02T00:00:00Z", "org": "acme"},
        {"title": "PROJ-1 elsewhere", "date": "2024-01-02T00:00:00Z", "org": "x"},
        {"title": "PROJ-1 late", "date": "2024-03-02T00:00:00Z", "org": "acme"},
    ],
}


@pytest.fixture(name="records_dir")
def record_files(tmp_path):
    for name, records in RECORDS.items():
        (tmp_path / f"{name}.json").write_text(json.dumps(records), encoding="utf-8")
    return tmp_path


@pytest.mark.asyncio
async def test_project_and_board(records_dir):
    source = FileRecordSource(str(records_dir))
    opts = ProgressOptions(project="PROJ", board="1")

    assert (await source.project(opts)).git_org_name == "acme"
    assert (await source.board(opts)).transition_order == ["open", "commits"]
    assert await source.board(ProgressOptions(project="PROJ", board="2")) is None


@pytest.mark.asyncio
async def test_workflows_scoped_by_project(records_dir):
    source = FileRecordSource(str(records_dir))

    workflows = await source.workflows(ProgressOptions(project="PROJ"))

    assert [w.key for w in workflows] == ["indeterminate"]


@pytest.mark.asyncio
async def test_issues_scoped_by_sprint_and_range(records_dir):
    source = FileRecordSource(str(records_dir))

    by_sprint = await source.issues(ProgressOptions(project="PROJ", sprint="Sprint 2"))
    by_range = await source.issues(
        ProgressOptions(
            project="PROJ",
            since=datetime.datetime(2024, 1, 10),
            until=datetime.datetime(2024, 1, 31),
        )
    )

    assert [i.key for i in by_sprint] == ["PROJ-2"]
    # PROJ-1 closed before the range, PROJ-2 was created after it
    assert by_range == []


@pytest.mark.asyncio
async def test_commits_scoped_by_org_matcher_and_range(records_dir):
    source = FileRecordSource(str(records_dir))
    opts = ProgressOptions(project="PROJ", until=datetime.datetime(2024, 2, 1))

    commits = await source.commits(opts, IssueKeyMatcher(["PROJ-1"]), "acme")

    assert [c.title for c in commits] == ["PROJ-1 fix"]


@pytest.mark.asyncio
async def test_missing_pulls_file_reads_as_empty(records_dir):
    source = FileRecordSource(str(records_dir))

    pulls = await source.pull_requests(
        ProgressOptions(), IssueKeyMatcher(["PROJ-1"]), "acme"
    )

    assert pulls == []


@pytest.mark.asyncio
async def test_missing_required_file(tmp_path):
    source = FileRecordSource(str(tmp_path))

    with pytest.raises(SourceError):
        await source.issues(ProgressOptions())


@pytest.mark.asyncio
async def test_invalid_json(tmp_path):
    (tmp_path / "projects.json").write_text("[{", encoding="utf-8")
    source = FileRecordSource(str(tmp_path))

    with pytest.raises(SourceError, match="Failed to parse JSON"):
        await source.project(ProgressOptions())


@pytest.mark.asyncio
async def test_records_must_be_a_list(tmp_path):
    (tmp_path / "projects.json").write_text('{"key": "PROJ"}', encoding="utf-8")
    source = FileRecordSource(str(tmp_path))

    with pytest.raises(SourceError, match="must contain a list"):
        await source.project(ProgressOptions())


@pytest.mark.asyncio
async def test_records_are_read_once(records_dir):
    source = FileRecordSource(str(records_dir))
    opts = ProgressOptions(project="PROJ")

    first = await source.issues(opts)
    (records_dir / "issues.json").unlink()
    second = await source.issues(opts)

    assert first == second
