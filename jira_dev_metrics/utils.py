"""Utility functions for Jira Dev Metrics.

This module provides common utility functions used across the metrics
calculations including time arithmetic, rounding and date handling.
"""

import datetime
import math
import os.path

import dateutil.parser
import pandas as pd
import seaborn as sns

from .common_constants import (
    GRANULARITY_DAILY,
    GRANULARITY_MONTHLY,
    GRANULARITY_WEEKLY,
)

ONE_HOUR = datetime.timedelta(hours=1)

# Upper bounds (in days) of the date range for each graph granularity
DAILY_RANGE_DAYS = 14
WEEKLY_RANGE_DAYS = 90


def parse_timestamp(value):
    """Parse `value` into a naive UTC `datetime`.

    Accepts ISO-like strings, `datetime.date`/`datetime.datetime` objects and
    pandas timestamps. Empty values yield `None`. Timezone-aware values are
    converted to UTC so that all arithmetic happens on comparable values.
    """
    if value is None or value == "":
        return None

    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()

    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime(value.year, value.month, value.day)
    else:
        parsed = dateutil.parser.parse(str(value))

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return parsed


def hours_between(end, start):
    """Return the number of whole hours from `start` to `end`.

    Partial hours are truncated toward zero, so the result is negative when
    `end` precedes `start`.
    """
    return int((end - start) / ONE_HOUR)


def round_half_up(value):
    """Round to the nearest integer, with halves rounding up."""
    return int(math.floor(value + 0.5))


def format_percentage(value):
    """Format a percentage with at most two decimals, e.g. `33.33%` or `50%`."""
    return f"{round(value, 2):g}%"


def granularity_for_range(since, until):
    """Pick the graph granularity for the range between `since` and `until`."""
    days = (until - since).days
    if days <= DAILY_RANGE_DAYS:
        return GRANULARITY_DAILY
    if days <= WEEKLY_RANGE_DAYS:
        return GRANULARITY_WEEKLY
    return GRANULARITY_MONTHLY


def granularity_to_frequency(granularity):
    """Map a graph granularity to a pandas offset alias."""
    return {
        GRANULARITY_DAILY: "D",
        GRANULARITY_WEEKLY: "W-MON",
        GRANULARITY_MONTHLY: "MS",
    }[granularity]


def get_extension(filename):
    """Get file extension from filename."""
    return os.path.splitext(filename)[1].lower()


def set_chart_context(context):
    """Set seaborn chart context."""
    sns.set_context(context)
