"""Average closed time calculator for Jira Dev Metrics."""

import logging

import pandas as pd

from ..utils import hours_between, round_half_up
from .base_calculator import BaseCalculator
from .period_utils import (
    closed_in_range,
    resolve_date_range,
    split_by_period,
    to_graph_records,
)

logger = logging.getLogger(__name__)

AVERAGE_CLOSED_TIME_COLUMNS = ["period", "average"]


class AverageClosedTimeCalculator(BaseCalculator):
    """Mean hours from creation to close of the issues closed in each
    graph period.
    """

    async def run(self):
        return await get_average_closed_time(self.query_manager, self.options)

    def write(self):
        result = self.get_result()
        if not result:
            return

        data = self.create_dataframe_from_records(
            result["graphs"], AVERAGE_CLOSED_TIME_COLUMNS
        )
        self.write_data_files(
            data,
            self.settings.get("average_closed_time_data"),
            "average closed time data",
        )


def calculate_average_closed_time(issues, since, until):
    """Return `(granularity, series)` of mean closed hours per period.

    Periods without closed issues report 0.
    """
    hours = pd.Series(
        [hours_between(i.closed_at, i.date) for i in issues],
        index=pd.DatetimeIndex([i.closed_at for i in issues]),
        dtype=float,
    )
    granularity, series = split_by_period(hours, since, until, "mean")
    return granularity, series.fillna(0).map(round_half_up)


async def get_average_closed_time(query_manager, opts):
    """Return the average closed time card data for the issues in scope.

    Only issues whose status belongs to the project workflow are counted.
    """
    try:
        logger.info(
            "Get average closed time based on date selection or sprint selection"
        )
        statuses = set(await query_manager.get_workflow_statuses(opts))
        issues = [
            i for i in await query_manager.get_issues(opts) if i.status in statuses
        ]

        since, until = resolve_date_range(opts, [i.closed_at for i in issues])
        closed = closed_in_range(issues, since, until) if since is not None else []

        if not closed:
            return {"type": "", "graphs": []}

        granularity, series = calculate_average_closed_time(closed, since, until)
        return {"type": granularity, "graphs": to_graph_records(series, "average")}
    except Exception as e:
        logger.error("Error in get_average_closed_time: %s", e)
        raise
