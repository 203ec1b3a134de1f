"""Throughput calculator for Jira Dev Metrics.

This module provides functionality to calculate throughput metrics: how many
issues were closed in the requested range, per day and per graph period.
"""

import logging

import matplotlib.pyplot as plt
import pandas as pd
from scipy import stats

from ..chart_styling_utils import (
    format_period_labels,
    save_chart_with_styling,
    set_chart_style,
)
from .base_calculator import BaseCalculator
from .period_utils import (
    closed_in_range,
    resolve_date_range,
    split_by_period,
    to_graph_records,
)

logger = logging.getLogger(__name__)

THROUGHPUT_COLUMNS = ["period", "count"]


class ThroughputCalculator(BaseCalculator):
    """Build a dict with the overall `throughput` (closed issues per day),
    the graph granularity as `type`, and `graphs`: one record per period
    with the number of issues closed in it.
    """

    async def run(self):
        return await get_throughput(self.query_manager, self.options)

    def write(self):
        result = self.get_result()
        if not result:
            return

        data = self.create_dataframe_from_records(
            result["graphs"], THROUGHPUT_COLUMNS
        )
        self.write_data_files(
            data, self.settings.get("throughput_data"), "throughput data"
        )

        if self.settings.get("throughput_chart"):
            self.write_chart(data, self.settings["throughput_chart"])
        else:
            logger.debug("No output file specified for throughput chart")

    def write_chart(self, data, output_file):
        """Write throughput chart to output file."""
        if self.check_data_empty(data, "throughput chart"):
            return

        chart_data = data.copy()
        chart_data.index = pd.DatetimeIndex(chart_data["period"])

        fig, ax = plt.subplots()

        if self.settings.get("throughput_chart_title"):
            ax.set_title(self.settings["throughput_chart_title"])

        # Calculate zero-indexed days to allow linear regression calculation
        day_zero = chart_data.index[0]
        chart_data["day"] = (chart_data.index - day_zero).days

        if len(chart_data.index) > 1:
            slope, intercept, _, _, _ = stats.linregress(
                chart_data["day"], chart_data["count"]
            )
            chart_data["fitted"] = slope * chart_data["day"] + intercept
            ax.plot(chart_data.index, chart_data["fitted"], "--", linewidth=2)

        ax.set_xlabel("Period starting")
        ax.set_ylabel("Number of items")

        ax.plot(chart_data.index, chart_data["count"], marker="o")
        plt.xticks(
            chart_data.index,
            format_period_labels(
                chart_data.index, self.settings.get("date_format", "%d/%m/%Y")
            ),
            rotation=70,
            size="small",
        )

        _, top = ax.get_ylim()
        ax.set_ylim(0, top + 1)

        for x, y in zip(chart_data.index, chart_data["count"]):
            if y == 0:
                continue
            ax.annotate(
                f"{y:.0f}",
                xy=(x, y + 0.2),
                ha="center",
                va="bottom",
                fontsize="x-small",
            )

        set_chart_style()
        save_chart_with_styling(fig, output_file, "throughput")


def calculate_throughput(closed_dates, since, until):
    """Count closed dates per graph period between `since` and `until`.

    Returns `(granularity, series)` where the series holds an integer count
    for every period, 0 for periods without closed issues.
    """
    counts = pd.Series(1.0, index=pd.DatetimeIndex(closed_dates))
    granularity, series = split_by_period(counts, since, until, "sum")
    return granularity, series.astype(int)


async def get_throughput(query_manager, opts):
    """Return the throughput card data for the issues in scope."""
    try:
        logger.info("Get throughput based on date selection or sprint selection")
        issues = await query_manager.get_issues(opts)

        since, until = resolve_date_range(opts, [i.closed_at for i in issues])
        if since is None:
            return {"throughput": 0, "type": "", "graphs": []}

        closed = closed_in_range(issues, since, until)

        granularity = ""
        graphs = []
        if closed:
            granularity, series = calculate_throughput(
                [i.closed_at for i in closed], since, until
            )
            graphs = to_graph_records(series, "count")

        days = (until - since).days
        throughput = round(len(closed) / days, 1) if days > 0 else 0

        return {"throughput": throughput, "type": granularity, "graphs": graphs}
    except Exception as e:
        logger.error("Error in get_throughput: %s", e)
        raise
