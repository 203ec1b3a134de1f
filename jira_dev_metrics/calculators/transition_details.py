"""Transition details calculator for Jira Dev Metrics.

For every workflow status, reports how many issues currently sit in it, what
share of all issues that is, and the mean hours recorded for that status.
"""

import logging

from ..utils import format_percentage, round_half_up
from .base_calculator import BaseCalculator

logger = logging.getLogger(__name__)

TRANSITION_DETAILS_COLUMNS = ["status", "time", "count", "progress"]


class TransitionDetailsCalculator(BaseCalculator):
    """Per-status issue counts and times, in workflow order."""

    async def run(self):
        return await get_transition_details(self.query_manager, self.options)

    def write(self):
        data = self.create_dataframe_from_records(
            self.get_result() or [], TRANSITION_DETAILS_COLUMNS
        )
        self.write_data_files(
            data,
            self.settings.get("transition_details_data"),
            "transition details data",
        )


def status_time(issues, status):
    """Mean hours recorded for `status` across `issues`, rounded."""
    if not issues:
        return 0
    total = 0
    for issue in issues:
        timing = issue.find_transition(status)
        if timing is not None:
            total += timing.time
    return round_half_up(total / len(issues)) if total else 0


def calculate_transition_details(issues, statuses):
    """Build one record per status in `statuses`."""
    details = []
    for status in statuses:
        in_status = [i for i in issues if i.status == status]
        progress = len(in_status) / len(issues) * 100 if issues else 0
        details.append(
            {
                "status": status,
                "time": status_time(in_status, status),
                "count": len(in_status),
                "progress": format_percentage(progress),
            }
        )

    unmapped = sorted({i.status for i in issues if i.status not in statuses} - {None})
    if unmapped:
        logger.warning(
            (
                "The following statuses were found, "
                "but are not part of the workflow, "
                "and have been ignored: %s"
            ),
            ", ".join(unmapped),
        )

    return details


async def get_transition_details(query_manager, opts):
    """Return the transition details card data for the issues in scope."""
    try:
        logger.info("Get transition details")
        statuses = await query_manager.get_workflow_statuses(opts)
        issues = await query_manager.get_issues(opts)
        return calculate_transition_details(issues, statuses)
    except Exception as e:
        logger.error("Error in get_transition_details: %s", e)
        raise
