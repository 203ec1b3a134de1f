"""Test configuration and fixtures for Jira Dev Metrics.

This module provides test fixtures and fake record sources for testing the
metrics calculations.
"""

import pytest

from .models import ProgressOptions, WorkflowCategory, WorkflowStatus
from .querymanager import QueryManager
from .test_classes import (
    FauxRecordSource,
    faux_board,
    faux_commit,
    faux_issue,
    faux_project,
    faux_pull,
)

# Fixtures


@pytest.fixture(name="base_minimal_settings")
def minimal_settings():
    """The smallest `settings` required to build a query manager and run the
    development progress calculation.
    """
    return {
        "scope": {
            "project": "PROJ",
            "board": "1",
            "since": None,
            "until": None,
            "sprint": None,
        },
        "status_categories": ["new", "indeterminate", "done"],
        "in_progress_category": "indeterminate",
        "commit_reference": "oldest",
        "max_results": None,
        "verbose": False,
        "date_format": "%Y-%m-%d",
    }


@pytest.fixture(name="opts")
def progress_options():
    """A request scope for project `PROJ` on board `1`."""
    return ProgressOptions(project="PROJ", board="1")


@pytest.fixture(name="workflows")
def workflow_categories():
    """Workflow categories with two in-progress statuses."""
    return [
        WorkflowCategory(
            key="new", workflows=(WorkflowStatus("open", "1"),), project="PROJ"
        ),
        WorkflowCategory(
            key="indeterminate",
            workflows=(
                WorkflowStatus("in progress", "3"),
                WorkflowStatus("review", "4"),
            ),
            project="PROJ",
        ),
        WorkflowCategory(
            key="done", workflows=(WorkflowStatus("closed", "6"),), project="PROJ"
        ),
    ]


@pytest.fixture(name="scenario_issues")
def two_issue_scenario():
    """Issue A has one matching commit and one closed pull request; issue B
    has neither.
    """
    return [
        faux_issue(
            "PROJ-1",
            "2024-01-01 09:00:00",
            [("open", 10, 2), ("in progress", 5, 1), ("closed", 0, 0)],
            status="closed",
        ),
        faux_issue(
            "PROJ-2",
            "2024-01-02 09:00:00",
            [("open", 20, 4), ("in progress", 6, 0)],
            status="in progress",
        ),
    ]


@pytest.fixture(name="scenario_commits")
def two_issue_commits():
    return [
        faux_commit("PROJ-1 add login form", "2024-01-02 21:00:00", org="acme"),
        faux_commit("Unrelated refactoring", "2024-01-03 09:00:00", org="acme"),
    ]


@pytest.fixture(name="scenario_pulls")
def two_issue_pulls():
    return [
        faux_pull(
            "PROJ-1: login form",
            "2024-01-03 09:00:00",
            "2024-01-04 15:00:00",
            org="acme",
        ),
        faux_pull("PROJ-2: still open", "2024-01-03 09:00:00", None, org="acme"),
    ]


@pytest.fixture(name="scenario_source")
def two_issue_source(scenario_issues, scenario_commits, scenario_pulls, workflows):
    return FauxRecordSource(
        project=faux_project(),
        board=faux_board(
            transition_order=["open", "commits", "pull request", "closed"]
        ),
        workflows=workflows,
        issues=scenario_issues,
        commits=scenario_commits,
        pulls=scenario_pulls,
    )


@pytest.fixture(name="scenario_query_manager")
def two_issue_query_manager(scenario_source):
    return QueryManager(scenario_source)
