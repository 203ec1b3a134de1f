"""Tests for transition time calculations in Jira Dev Metrics."""

import datetime

import pytest

from ..models import Commit, StageAverage, StageTiming
from ..test_classes import faux_commit, faux_issue, faux_pull
from .transitions import (
    calculate_avg_time_for_transitions,
    calculate_time_for_commits,
    calculate_time_for_pulls,
    stage_timings_frame,
)

TRANS_ORDER = ["open", "commits", "pull request", "closed"]


@pytest.fixture(name="issues")
def simple_issues():
    return [
        faux_issue("PROJ-1", "2024-01-01 09:00:00", [("open", 10, 2)]),
        faux_issue("PROJ-2", "2024-01-02 09:00:00", [("open", 20, 4)]),
    ]


def test_commits_without_matches_give_zero_timings(issues):
    commits = [faux_commit("OTHER-1 unrelated", "2024-01-03")]

    updated = calculate_time_for_commits(commits, issues)

    for issue in updated:
        assert issue.find_transition("commits") == StageTiming("commits", 0, 0)
        assert issue.commit_date is None


def test_pulls_without_matches_give_zero_timings(issues):
    pulls = [faux_pull("OTHER-1", "2024-01-03", "2024-01-04")]

    updated = calculate_time_for_pulls(pulls, calculate_time_for_commits([], issues))

    for issue in updated:
        assert issue.find_transition("pull request") == StageTiming(
            "pull request", 0, 0
        )


def test_commit_time_uses_oldest_match_by_default(issues):
    commits = [
        faux_commit("PROJ-1 later", "2024-01-03 09:00:00"),
        faux_commit("PROJ-1 earlier", "2024-01-02 09:00:00"),
    ]

    updated = calculate_time_for_commits(commits, issues)

    assert updated[0].find_transition("commits").time == 24
    assert updated[0].commit_date == commits[1].date


def test_commit_time_with_newest_reference(issues):
    commits = [
        faux_commit("PROJ-1 later", "2024-01-03 09:00:00"),
        faux_commit("PROJ-1 earlier", "2024-01-02 09:00:00"),
    ]

    updated = calculate_time_for_commits(commits, issues, "newest")

    assert updated[0].find_transition("commits").time == 48
    assert updated[0].commit_date == commits[0].date


def test_commit_time_does_not_modify_input(issues):
    commits = [faux_commit("PROJ-1", "2024-01-02 09:00:00")]

    updated = calculate_time_for_commits(commits, issues)

    assert issues[0].find_transition("commits") is None
    assert issues[0].commit_date is None
    assert updated[0] is not issues[0]
    assert [i.key for i in updated] == ["PROJ-1", "PROJ-2"]


def test_recalculating_commits_keeps_one_entry(issues):
    commits = [faux_commit("PROJ-1", "2024-01-02 09:00:00")]

    twice = calculate_time_for_commits(
        commits, calculate_time_for_commits(commits, issues)
    )

    statuses = [t.status for t in twice[0].transitions]
    assert statuses.count("commits") == 1


def test_pull_time_and_idle_time(issues):
    commits = [faux_commit("PROJ-1", "2024-01-02 21:00:00")]
    pulls = [
        faux_pull("PROJ-1 second", "2024-01-05 09:00:00", "2024-01-05 19:30:00"),
        faux_pull("PROJ-1 first", "2024-01-03 09:00:00", "2024-01-04 15:00:00"),
        faux_pull("PROJ-1 open", "2024-01-02 22:00:00", None),
    ]

    updated = calculate_time_for_pulls(
        pulls, calculate_time_for_commits(commits, issues)
    )

    timing = updated[0].find_transition("pull request")
    # 30 hours for the first PR plus 10 for the second
    assert timing.time == 40
    # from the commit to the earliest closed PR
    assert timing.idle_time == 12


def test_pull_idle_time_without_commit(issues):
    pulls = [faux_pull("PROJ-2", "2024-01-03 09:00:00", "2024-01-03 12:00:00")]

    updated = calculate_time_for_pulls(pulls, calculate_time_for_commits([], issues))

    assert updated[1].find_transition("pull request") == StageTiming(
        "pull request", 3, 0
    )


def test_key_substring_matches_both_issues():
    issues = [
        faux_issue("PROJ-1", "2024-01-01 00:00:00"),
        faux_issue("PROJ-12", "2024-01-01 00:00:00"),
    ]
    commits = [faux_commit("PROJ-12 fix", "2024-01-02 00:00:00")]

    updated = calculate_time_for_commits(commits, issues)

    assert [i.find_transition("commits").time for i in updated] == [24, 24]


def test_commit_errors_are_logged_and_raised(caplog):
    issues = [faux_issue("PROJ-1", "2024-01-01 00:00:00")]
    # A timezone-aware commit date cannot be compared with a naive issue date
    commits = [
        Commit(
            title="PROJ-1",
            date=datetime.datetime(2024, 1, 2, tzinfo=datetime.timezone.utc),
        )
    ]

    with pytest.raises(TypeError):
        calculate_time_for_commits(commits, issues)

    assert "Error in calculate_time_for_commits" in caplog.text


def test_stage_timings_frame_keeps_first_entry():
    issues = [faux_issue("PROJ-1", "2024-01-01", [("open", 1, 0), ("open", 5, 0)])]

    frame = stage_timings_frame(issues)

    assert frame.to_dict("records") == [
        {"key": "PROJ-1", "issue": 0, "status": "open", "time": 1, "idle_time": 0}
    ]


def test_averages_follow_requested_order():
    issues = [
        faux_issue("PROJ-1", "2024-01-01", [("closed", 4, 0), ("open", 2, 2)]),
    ]

    averages = calculate_avg_time_for_transitions(
        ["open", "review", "closed"], issues
    )

    assert [a.status for a in averages] == ["open", "review", "closed"]
    assert averages[1] == StageAverage("review", 0, 0)


def test_averages_divide_by_all_issues():
    issues = [
        faux_issue("PROJ-1", "2024-01-01", [("open", 10, 2)]),
        faux_issue("PROJ-2", "2024-01-01", [("open", 21, 4)]),
        faux_issue("PROJ-3", "2024-01-01", []),
    ]

    averages = calculate_avg_time_for_transitions(["open"], issues)

    # (10 + 21) / 3 = 10.33, (2 + 4) / 3 = 2
    assert averages == [StageAverage("open", 10, 2)]


def test_averages_round_half_up():
    issues = [
        faux_issue("PROJ-1", "2024-01-01", [("open", 3, 1)]),
        faux_issue("PROJ-2", "2024-01-01", [("open", 2, 0)]),
    ]

    assert calculate_avg_time_for_transitions(["open"], issues) == [
        StageAverage("open", 3, 1)
    ]


def test_averages_match_reconstructed_totals():
    issues = [
        faux_issue("PROJ-1", "2024-01-01", [("open", 7, 1), ("closed", 3, 0)]),
        faux_issue("PROJ-2", "2024-01-01", [("open", 9, 3)]),
        faux_issue("PROJ-3", "2024-01-01", [("closed", 12, 5)]),
        faux_issue("PROJ-4", "2024-01-01", [("open", 1, 0), ("closed", 2, 2)]),
    ]

    averages = calculate_avg_time_for_transitions(["open", "closed"], issues)

    for average in averages:
        total = sum(
            i.find_transition(average.status).time
            for i in issues
            if i.find_transition(average.status)
        )
        assert average.time == int(total / len(issues) + 0.5)


def test_averages_are_idempotent(issues):
    first = calculate_avg_time_for_transitions(TRANS_ORDER, issues)
    second = calculate_avg_time_for_transitions(TRANS_ORDER, issues)

    assert first == second


def test_averages_without_issues():
    assert calculate_avg_time_for_transitions(["open", "closed"], []) == [
        StageAverage("open", 0, 0),
        StageAverage("closed", 0, 0),
    ]


def test_two_issue_scenario(scenario_issues, scenario_commits, scenario_pulls):
    issues = calculate_time_for_commits(scenario_commits, scenario_issues)
    issues = calculate_time_for_pulls(scenario_pulls, issues)

    averages = calculate_avg_time_for_transitions(TRANS_ORDER, issues)

    assert averages == [
        StageAverage("open", 15, 3),
        # 36 hours from creation to commit for PROJ-1, nothing for PROJ-2
        StageAverage("commits", 18, 0),
        # 30 hours open and 12 hours idle for PROJ-1's pull request
        StageAverage("pull request", 15, 6),
        StageAverage("closed", 0, 0),
    ]
