"""Base calculator class with common functionality for Jira Dev Metrics.

This module provides a base calculator class that contains the output-writing
logic shared by the dashboard card calculators.
"""

import json
import logging

import pandas as pd

from ..calculator import Calculator
from ..utils import get_extension

logger = logging.getLogger(__name__)


class BaseCalculator(Calculator):
    """Base calculator class with common functionality."""

    def create_dataframe_from_records(self, records, columns):
        """Create a DataFrame from a list of plain dicts with `columns`."""
        return pd.DataFrame(list(records), columns=columns)

    def check_data_empty(self, data, name):
        """Check if data is empty and log a warning if so."""
        if data is None:
            return True

        if len(data.index) == 0:
            logger.warning("Cannot write %s with zero items", name)
            return True

        return False

    def write_data_files(self, data, output_files, name):
        """Write `data` to each file in `output_files`.

        The format follows the file extension: `.json` writes a list of
        records, anything else a CSV file with a header row.
        """
        if not output_files:
            logger.debug("No output file specified for %s", name)
            return

        date_format = self.settings.get("date_format", "%Y-%m-%d")

        for output_file in output_files:
            logger.info("Writing %s to %s", name, output_file)
            output_extension = get_extension(output_file)

            if output_extension == ".json":
                data.to_json(output_file, orient="records", date_format="iso")
            else:
                data.to_csv(
                    output_file, header=True, index=False, date_format=date_format
                )

    def write_json_file(self, value, output_files, name):
        """Write a plain JSON-serialisable `value` to each file in `output_files`."""
        if not output_files:
            logger.debug("No output file specified for %s", name)
            return

        for output_file in output_files:
            logger.info("Writing %s to %s", name, output_file)
            with open(output_file, "w", encoding="utf-8") as out:
                out.write(json.dumps(value, default=str))
