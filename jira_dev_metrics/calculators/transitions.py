"""Transition time calculations for Jira Dev Metrics.

Adds the synthetic `commits` and `pull request` stage timings to issues and
averages stage timings across an issue set.

All times are whole hours. The `commits` stage runs from issue creation to
the reference commit; the `pull request` stage covers the lifetime of every
closed pull request mentioning the issue, and its idle time is the wait from
the reference commit to the first of those pull requests. Commit timings must
be calculated before pull request timings, since the latter read the
`commit_date` set by the former.
"""

import logging

import pandas as pd

from ..common_constants import (
    COMMIT_REFERENCE_OLDEST,
    COMMITS_STAGE,
    PULL_REQUEST_STAGE,
)
from ..matching import match_commits, match_pull_requests, select_reference_commit
from ..models import StageAverage, StageTiming
from ..utils import hours_between, round_half_up

logger = logging.getLogger(__name__)


def calculate_time_for_commits(commits, issues, reference=COMMIT_REFERENCE_OLDEST):
    """Return copies of `issues` with a `commits` stage timing and
    `commit_date` set from the matching commits.

    Issues without a matching commit get a zero timing and no commit date.
    """
    try:
        logger.info("Calculate time for commits")
        updated = []
        for issue in issues:
            matched = match_commits(issue.key, commits)
            commit = select_reference_commit(matched, reference)
            commit_date = commit.date if commit is not None else None
            timing = StageTiming(
                status=COMMITS_STAGE,
                time=hours_between(commit_date, issue.date) if commit_date else 0,
                idle_time=0,
            )
            updated.append(issue.with_stage_timing(timing, commit_date=commit_date))
        return updated
    except Exception as e:
        logger.error("Error in calculate_time_for_commits: %s", e)
        raise


def calculate_time_for_pulls(pulls, issues):
    """Return copies of `issues` with a `pull request` stage timing.

    `time` is the summed open-to-close hours of the issue's closed pull
    requests; `idle_time` the hours from the issue's `commit_date` to the
    earliest of them, or 0 when the issue has no commit date.
    """
    try:
        logger.info("Calculate time for pulls")
        updated = []
        for issue in issues:
            issue_pulls = match_pull_requests(issue.key, pulls)
            total_time = 0
            idle_time = 0
            if issue_pulls:
                if issue.commit_date:
                    idle_time = hours_between(
                        issue_pulls[0].created_at, issue.commit_date
                    )
                total_time = sum(
                    hours_between(p.closed_at, p.created_at) for p in issue_pulls
                )
            timing = StageTiming(
                status=PULL_REQUEST_STAGE, time=total_time, idle_time=idle_time
            )
            updated.append(issue.with_stage_timing(timing))
        return updated
    except Exception as e:
        logger.error("Error in calculate_time_for_pulls: %s", e)
        raise


def stage_timings_frame(issues):
    """Build a DataFrame with one row per issue and recorded stage.

    Only the first timing per issue and stage is kept.
    """
    rows = [
        {
            "key": issue.key,
            "issue": index,
            "status": timing.status,
            "time": timing.time,
            "idle_time": timing.idle_time,
        }
        for index, issue in enumerate(issues)
        for timing in issue.transitions
    ]
    frame = pd.DataFrame(rows, columns=["key", "issue", "status", "time", "idle_time"])
    return frame.drop_duplicates(subset=["issue", "status"], keep="first")


def calculate_avg_time_for_transitions(trans_order, issues):
    """Average stage timings across `issues`, one result per stage in
    `trans_order`, in that order.

    Each stage's totals are divided by the number of issues, including issues
    without a timing for the stage, and rounded to whole hours.
    """
    try:
        issues = list(issues)
        issue_count = len(issues)

        totals = (
            stage_timings_frame(issues)
            .groupby("status", sort=False)[["time", "idle_time"]]
            .sum()
        )

        unknown = sorted(set(totals.index) - set(trans_order))
        if unknown:
            logger.debug(
                "Ignoring timings for stages not on the board: %s", ", ".join(unknown)
            )

        dev_progress = []
        for trans in trans_order:
            time = totals.at[trans, "time"] if trans in totals.index else 0
            idle_time = totals.at[trans, "idle_time"] if trans in totals.index else 0
            dev_progress.append(
                StageAverage(
                    status=trans,
                    time=round_half_up(time / issue_count) if time else 0,
                    idle_time=(
                        round_half_up(idle_time / issue_count) if idle_time else 0
                    ),
                )
            )
        return dev_progress
    except Exception as e:
        logger.error("Error in calculate_avg_time_for_transitions: %s", e)
        raise
