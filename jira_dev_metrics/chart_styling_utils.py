"""Common chart styling utilities shared by the chart writers."""

import logging

import matplotlib.pyplot as plt
import seaborn as sns

logger = logging.getLogger(__name__)


def set_chart_style(style="whitegrid", despine=True):
    """Set seaborn chart style."""
    sns.set_style(style)
    if despine:
        sns.despine()


def format_period_labels(index, date_format):
    """Format a DatetimeIndex as tick labels using `date_format`."""
    return [d.strftime(date_format) for d in index]


def save_chart_with_styling(fig, output_file, title="Chart"):
    """Save chart with common styling and logging.

    Args:
        fig: Matplotlib figure object
        output_file: Output file path
        title: Chart title for logging
    """
    logger.info("Writing %s chart to %s", title, output_file)
    fig.savefig(output_file, bbox_inches="tight", dpi=300)
    plt.close(fig)
