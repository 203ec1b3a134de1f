"""Development progress calculator for Jira Dev Metrics.

Reports the mean time and idle time issues spend at each board stage,
including the synthetic `commits` and `pull request` stages derived from
source control.
"""

import asyncio
import logging

import matplotlib.pyplot as plt

from ..chart_styling_utils import save_chart_with_styling, set_chart_style
from ..common_constants import (
    COMMIT_REFERENCE_OLDEST,
    COMMITS_STAGE,
    DEFAULT_IN_PROGRESS_CATEGORY,
    DEFAULT_STATUS_CATEGORIES,
)
from ..matching import IssueKeyMatcher
from .base_calculator import BaseCalculator
from .transitions import (
    calculate_avg_time_for_transitions,
    calculate_time_for_commits,
    calculate_time_for_pulls,
)

logger = logging.getLogger(__name__)

DEVELOPMENT_PROGRESS_COLUMNS = ["status", "time", "idle_time"]


class DevelopmentProgressCalculator(BaseCalculator):
    """Average time per stage, in board order, as a list of `StageAverage`."""

    async def run(self):
        return await get_development_progress(
            self.query_manager, self.options, self.settings
        )

    def write(self):
        dev_progress = self.get_result() or []
        data = self.create_dataframe_from_records(
            (s.to_dict() for s in dev_progress), DEVELOPMENT_PROGRESS_COLUMNS
        )

        self.write_data_files(
            data,
            self.settings.get("development_progress_data"),
            "development progress data",
        )

        if self.settings.get("development_progress_chart"):
            self.write_chart(data, self.settings["development_progress_chart"])
        else:
            logger.debug("No output file specified for development progress chart")

    def write_chart(self, data, output_file):
        """Write a horizontal bar chart of active and idle hours per stage."""
        if self.check_data_empty(data, "development progress chart"):
            return

        chart_data = data.set_index("status")[["time", "idle_time"]].rename(
            columns={"time": "Time", "idle_time": "Idle time"}
        )

        fig, ax = plt.subplots()

        if self.settings.get("development_progress_chart_title"):
            ax.set_title(self.settings["development_progress_chart_title"])

        # Keep board order from top to bottom
        chart_data.iloc[::-1].plot.barh(ax=ax, stacked=True)
        ax.set_xlabel("Average hours")
        ax.set_ylabel("Stage")
        ax.legend(loc="center left", bbox_to_anchor=(1, 0.5))

        set_chart_style()
        save_chart_with_styling(fig, output_file, "development progress")


def resolve_transition_order(board):
    """Return the stages to report on, in order.

    An explicit board transition order is used verbatim; otherwise the stages
    of the board columns are flattened in column order.
    """
    if board.transition_order is not None:
        return list(board.transition_order)
    return [stage for stages in board.board_config.values() for stage in stages]


def collect_in_progress_stages(
    workflows,
    status_categories=DEFAULT_STATUS_CATEGORIES,
    in_progress_category=DEFAULT_IN_PROGRESS_CATEGORY,
):
    """Return the names of all workflow statuses in the in-progress category.

    Only categories listed in `status_categories` are considered. Names are
    de-duplicated, keeping the first occurrence.
    """
    stages = []
    if in_progress_category not in status_categories:
        return stages

    for category in workflows:
        if category.key != in_progress_category:
            continue
        for status in category.workflows:
            if status.untranslated_name not in stages:
                stages.append(status.untranslated_name)
    return stages


async def get_development_progress(query_manager, opts, settings=None):
    """Compute the average time per stage for the issues in scope.

    Returns an empty list when the project, board or workflows cannot be
    found, or when no issue in scope reached development.
    """
    settings = settings or {}
    try:
        logger.info("Get development progress")

        project = await query_manager.get_project(opts)
        if not project:
            logger.info("No project found for %s", opts.project)
            return []

        board = await query_manager.get_board(opts)
        if not board:
            logger.info("No board found for %s", opts.board)
            return []
        trans_order = resolve_transition_order(board)

        workflows = await query_manager.get_workflows(opts)
        if not workflows:
            logger.info("No workflows found for project %s", project.key)
            return []
        in_progress_stages = collect_in_progress_stages(
            workflows,
            settings.get("status_categories") or DEFAULT_STATUS_CATEGORIES,
            settings.get("in_progress_category") or DEFAULT_IN_PROGRESS_CATEGORY,
        )

        issues = await query_manager.get_dev_issues(opts, in_progress_stages)
        if not issues:
            return []

        if COMMITS_STAGE in trans_order:
            matcher = IssueKeyMatcher(issue.key for issue in issues)
            commits, pulls = await asyncio.gather(
                query_manager.get_commits(opts, matcher, project.git_org_name),
                query_manager.get_pull_requests(opts, matcher, project.git_org_name),
            )

            issues = calculate_time_for_commits(
                commits,
                issues,
                settings.get("commit_reference") or COMMIT_REFERENCE_OLDEST,
            )
            issues = calculate_time_for_pulls(pulls, issues)

        return calculate_avg_time_for_transitions(trans_order, issues)
    except Exception as e:
        logger.error("Error in get_development_progress: %s", e)
        raise
