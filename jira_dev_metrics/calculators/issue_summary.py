"""Issue summary cards for Jira Dev Metrics.

Small dashboard cards that summarise the issues in scope: project details,
average issue and development time, issue type counts, the creation heat map
and per-sprint activity.
"""

import logging

import pandas as pd

from ..common_constants import DEFAULT_IN_PROGRESS_CATEGORY, DEFAULT_STATUS_CATEGORIES
from ..utils import hours_between, round_half_up
from .base_calculator import BaseCalculator
from .development_progress import collect_in_progress_stages

logger = logging.getLogger(__name__)

ISSUE_TYPES_COLUMNS = ["type", "count"]
HEAT_MAP_COLUMNS = ["day", "hour", "count"]
SPRINT_ACTIVITY_COLUMNS = ["sprint", "created", "closed", "open"]
WEEKDAYS = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


class ProjectInfoCalculator(BaseCalculator):
    """The project in scope, as a plain dict."""

    async def run(self):
        return await get_project_info(self.query_manager, self.options)

    def write(self):
        self.write_json_file(
            self.get_result() or {},
            self.settings.get("project_info_data"),
            "project info",
        )


class IssueTimeCalculator(BaseCalculator):
    """Average issue time (creation to close) and average development time
    (total recorded stage hours) of the issues in scope.
    """

    async def run(self):
        return {
            "issue_time": await get_avg_issue_time(self.query_manager, self.options),
            "development_time": await get_avg_time(
                self.query_manager,
                self.options,
                self.settings,
            ),
        }

    def write(self):
        self.write_json_file(
            self.get_result() or {},
            self.settings.get("issue_time_data"),
            "issue time data",
        )


class IssueTypesCalculator(BaseCalculator):
    """Number of issues per issue type."""

    async def run(self):
        return await get_issue_types_count(self.query_manager, self.options)

    def write(self):
        data = self.create_dataframe_from_records(
            self.get_result() or [], ISSUE_TYPES_COLUMNS
        )
        self.write_data_files(
            data, self.settings.get("issue_types_data"), "issue types data"
        )


class HeatMapCalculator(BaseCalculator):
    """Number of issues created per weekday and hour."""

    async def run(self):
        return await get_issue_heat_map(self.query_manager, self.options)

    def write(self):
        data = self.create_dataframe_from_records(
            self.get_result() or [], HEAT_MAP_COLUMNS
        )
        self.write_data_files(data, self.settings.get("heat_map_data"), "heat map data")


class SprintActivityCalculator(BaseCalculator):
    """Created, closed and open issue counts per sprint."""

    async def run(self):
        return await get_sprint_activity(self.query_manager, self.options)

    def write(self):
        data = self.create_dataframe_from_records(
            self.get_result() or [], SPRINT_ACTIVITY_COLUMNS
        )
        self.write_data_files(
            data, self.settings.get("sprint_activity_data"), "sprint activity data"
        )


async def get_project_info(query_manager, opts):
    """Return the project in scope as a dict, or an empty dict."""
    try:
        logger.info("Get project info")
        project = await query_manager.get_project(opts)
        return project.to_dict() if project else {}
    except Exception as e:
        logger.error("Error in get_project_info: %s", e)
        raise


async def get_avg_issue_time(query_manager, opts):
    """Return the issue count and the mean creation-to-close hours of the
    closed issues in scope.
    """
    try:
        logger.info("Get average issue time")
        issues = await query_manager.get_issues(opts)
        hours = [hours_between(i.closed_at, i.date) for i in issues if i.closed_at]
        average = round_half_up(sum(hours) / len(hours)) if hours else 0
        return {"count": len(issues), "average": average}
    except Exception as e:
        logger.error("Error in get_avg_issue_time: %s", e)
        raise


async def get_avg_time(query_manager, opts, settings=None):
    """Return the development issue count and their mean total stage hours.

    Development issues are those that reached a status of the in-progress
    workflow category.
    """
    settings = settings or {}
    try:
        logger.info("Get average development time")
        in_progress_stages = collect_in_progress_stages(
            await query_manager.get_workflows(opts),
            settings.get("status_categories") or DEFAULT_STATUS_CATEGORIES,
            settings.get("in_progress_category") or DEFAULT_IN_PROGRESS_CATEGORY,
        )
        issues = await query_manager.get_dev_issues(opts, in_progress_stages)
        totals = [sum(t.time for t in i.transitions) for i in issues]
        average = round_half_up(sum(totals) / len(totals)) if totals else 0
        return {"count": len(issues), "average": average}
    except Exception as e:
        logger.error("Error in get_avg_time: %s", e)
        raise


async def get_issue_types_count(query_manager, opts):
    """Return `[{"type", "count"}]`, most frequent type first."""
    try:
        logger.info("Get issue types count")
        issues = await query_manager.get_issues(opts)
        counts = {}
        for issue in issues:
            issue_type = issue.issue_type or "Unknown"
            counts[issue_type] = counts.get(issue_type, 0) + 1
        return [
            {"type": issue_type, "count": count}
            for issue_type, count in sorted(counts.items(), key=lambda c: (-c[1], c[0]))
        ]
    except Exception as e:
        logger.error("Error in get_issue_types_count: %s", e)
        raise


def calculate_heat_map(issues):
    """Count issue creations per weekday and hour of the day.

    Only non-empty cells are returned, ordered by weekday then hour.
    """
    if not issues:
        return []

    created = pd.DatetimeIndex([i.date for i in issues])
    frame = pd.DataFrame({"weekday": created.dayofweek, "hour": created.hour})
    counts = frame.groupby(["weekday", "hour"]).size()

    return [
        {"day": WEEKDAYS[weekday], "hour": int(hour), "count": int(count)}
        for (weekday, hour), count in counts.items()
    ]


async def get_issue_heat_map(query_manager, opts):
    """Return the issue creation heat map for the issues in scope."""
    try:
        logger.info("Get issues for heat map")
        return calculate_heat_map(await query_manager.get_issues(opts))
    except Exception as e:
        logger.error("Error in get_issue_heat_map: %s", e)
        raise


def calculate_sprint_activity(issues):
    """Count created, closed and open issues per sprint, in first-seen order.

    Issues without a sprint are not counted.
    """
    activity = {}
    for issue in issues:
        if not issue.sprint:
            continue
        sprint = activity.setdefault(
            issue.sprint, {"sprint": issue.sprint, "created": 0, "closed": 0, "open": 0}
        )
        sprint["created"] += 1
        if issue.closed_at is not None:
            sprint["closed"] += 1
        else:
            sprint["open"] += 1
    return list(activity.values())


async def get_sprint_activity(query_manager, opts):
    """Return the sprint activity card data for the issues in scope."""
    try:
        logger.info("Get sprint activity")
        return calculate_sprint_activity(await query_manager.get_issues(opts))
    except Exception as e:
        logger.error("Error in get_sprint_activity: %s", e)
        raise
