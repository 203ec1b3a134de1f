"""Calculator framework for Jira Dev Metrics.

Each dashboard card is a `Calculator`: `run()` is a coroutine that fetches
records through the query manager and returns the card data, and `write()`
stores that data in the output files named in the settings.
"""

import logging

from .models import ProgressOptions

logger = logging.getLogger(__name__)


class Calculator:
    """Base class for calculators."""

    def __init__(self, query_manager, settings, results):
        """Initialise with a `QueryManager`, a dict of `settings`,
        and a reference to the dict of calculator results, keyed by
        calculator class.
        """
        self.query_manager = query_manager
        self.settings = settings
        self.results = results

    @property
    def options(self):
        """The request scope built from the `scope` settings."""
        return ProgressOptions.from_settings(self.settings)

    def get_result(self, calculator=None, default=None):
        """Get the result of a calculator. If `calculator` is not given,
        return the result of this calculator.
        """
        return self.results.get(calculator or self.__class__, default)

    async def run(self):
        """Run the calculator and return its results.
        These will be automatically saved
        against this class and can be accessed by other calculators via
        `get_result()`.
        """

    def write(self):
        """Write output files, if required."""


async def run_calculators(calculators, query_manager, settings):
    """Run all calculators passed in, in the order listed.
    Returns the aggregated results.
    """
    results = {}
    calculators = [C(query_manager, settings, results) for C in calculators]

    # Run all calculators first
    for c in calculators:
        logger.info("%s running", c.__class__.__name__)
        results[c.__class__] = await c.run()
        logger.info("%s completed", c.__class__.__name__)

    # Write all files as a second pass
    for c in calculators:
        logger.info("Writing file for %s", c.__class__.__name__)
        try:
            c.write()
        except (OSError, ValueError, TypeError, KeyError):
            logger.exception(
                "Writing file for %s failed. Attempting to run subsequent "
                "writers regardless.",
                c.__class__.__name__,
            )
        else:
            logger.info("%s completed", c.__class__.__name__)

    return results
