import argparse
import asyncio
import logging
import os

from dotenv import load_dotenv

from .calculator import run_calculators
from .config import ConfigError, config_to_options
from .config_main import CALCULATORS
from .querymanager import QueryManager
from .sources import FileRecordSource
from .utils import parse_timestamp, set_chart_context

load_dotenv()

logger = logging.getLogger(__name__)

SOURCE_DIR_ENV = "DEV_METRICS_SOURCE_DIR"


def configure_argument_parser():
    """Configure an ArgumentParser that manages command line options."""

    parser = argparse.ArgumentParser(
        description=(
            "Report development progress metrics from exported Jira and "
            "source control records."
        )
    )

    # Basic options
    parser.add_argument(
        "config", metavar="config.yml", nargs="?", help="Configuration file"
    )
    parser.add_argument(
        "-v", dest="verbose", action="store_true", help="Verbose output"
    )
    parser.add_argument(
        "-vv",
        dest="very_verbose",
        action="store_true",
        help="Even more verbose output",
    )
    parser.add_argument(
        "-n",
        metavar="N",
        dest="max_results",
        type=int,
        help="Only use the first N issues in scope",
    )

    # Output directory
    parser.add_argument(
        "--output-directory",
        "-o",
        metavar="metrics",
        help=(
            "Write output files to this directory, "
            "rather than the current working directory."
        ),
    )

    # Source options
    parser.add_argument(
        "--source-dir",
        metavar="records",
        help=f"Directory holding the exported records (overrides {SOURCE_DIR_ENV})",
    )

    # Scope options
    parser.add_argument("--project", metavar="PROJ", help="Project key")
    parser.add_argument("--board", metavar="1", help="Board id")
    parser.add_argument(
        "--since", metavar="2024-01-01", type=parse_timestamp, help="Start of range"
    )
    parser.add_argument(
        "--until", metavar="2024-03-31", type=parse_timestamp, help="End of range"
    )
    parser.add_argument("--sprint", metavar="Sprint 1", help="Sprint name")

    return parser


def main():
    parser = configure_argument_parser()
    args = parser.parse_args()
    run_command_line(parser, args)


def run_command_line(parser, args):
    if not args.config:
        parser.print_usage()
        return

    logging.basicConfig(
        format="[%(asctime)s %(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=(
            logging.DEBUG
            if args.very_verbose
            else logging.INFO if args.verbose else logging.WARNING
        ),
    )

    # Configuration and settings
    # (command line arguments override config file options)

    logger.debug("Parsing options from %s", args.config)
    try:
        with open(args.config, encoding="utf-8") as config:
            options = config_to_options(
                config.read(), cwd=os.path.dirname(os.path.abspath(args.config))
            )
    except FileNotFoundError:
        print(
            f"Error: Configuration file '{args.config}' not found. "
            "Please provide a valid config file."
        )
        return

    # Allow command line arguments to override options
    override_options(options["settings"], args)
    override_options(options["settings"]["scope"], args)

    source_dir = resolve_source_directory(options["source"], args)

    # Set charting context, which determines how charts are rendered
    set_chart_context("paper")

    # Set output directory if required
    output_dir = None
    if "output_directory" in options:
        output_dir = options["output_directory"]
    if args.output_directory:
        output_dir = args.output_directory
    if output_dir:
        logger.info("Changing working directory to %s", output_dir)
        os.makedirs(output_dir, exist_ok=True)
        os.chdir(output_dir)

    # Select data source
    if options["source"]["type"] == "files":
        source = FileRecordSource(source_dir)
    else:
        raise ConfigError("Unknown source")

    logger.info("Running calculators")
    query_manager = QueryManager(source, options["settings"])
    asyncio.run(run_calculators(CALCULATORS, query_manager, options["settings"]))


def resolve_source_directory(source_options, args):
    """Return the absolute records directory.

    `--source-dir` wins over the environment, which wins over the config file.
    """
    directory = (
        args.source_dir
        or os.environ.get(SOURCE_DIR_ENV)
        or source_options["directory"]
    )
    if not directory:
        raise ConfigError(
            f"No records directory given. Set `Directory` in the `Source` "
            f"section, pass --source-dir or set {SOURCE_DIR_ENV}."
        )
    return os.path.abspath(directory)


def override_options(options, arguments):
    """Update `options` dict with settings from `arguments`
    with the same key.
    """
    for key in options.keys():
        if getattr(arguments, key, None) is not None:
            options[key] = getattr(arguments, key)


if __name__ == "__main__":
    main()
