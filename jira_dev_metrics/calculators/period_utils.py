"""Helpers for dashboard cards that report on a date range.

These split closed issues into graph periods whose length depends on how long
the requested range is (see `granularity_for_range`).
"""

import numpy as np
import pandas as pd

from ..utils import granularity_for_range, granularity_to_frequency


def resolve_date_range(opts, dates):
    """Return `(since, until)` for a card.

    Bounds missing from `opts` fall back to the earliest/latest of `dates`.
    Returns `(None, None)` when a bound is missing and there are no dates.
    """
    dates = [d for d in dates if d is not None]
    since = opts.since if opts.since is not None else min(dates, default=None)
    until = opts.until if opts.until is not None else max(dates, default=None)
    if since is None or until is None:
        return None, None
    return since, until


def closed_in_range(issues, since, until):
    """Return the issues closed between `since` and `until`, inclusive."""
    return [
        issue
        for issue in issues
        if issue.closed_at is not None and since <= issue.closed_at <= until
    ]


def split_by_period(values, since, until, aggfunc="sum"):
    """Aggregate a timestamp-indexed Series into graph periods.

    Every period between `since` and `until` appears in the result, so
    periods without values are present (with a 0 sum, or NaN for a mean).
    Returns `(granularity, series)`.
    """
    granularity = granularity_for_range(since, until)
    frequency = granularity_to_frequency(granularity)

    # Anchor the first and last period even when nothing happened in them
    bounds = pd.Series([np.nan, np.nan], index=pd.DatetimeIndex([since, until]))
    series = pd.concat([values.astype(float), bounds]).sort_index()

    return granularity, series.resample(frequency).agg(aggfunc)


def to_graph_records(series, value_name, date_format="%Y-%m-%d"):
    """Convert a period-indexed Series into a list of plain dicts."""
    return [
        {"period": period.strftime(date_format), value_name: value}
        for period, value in zip(series.index, series.tolist())
    ]
