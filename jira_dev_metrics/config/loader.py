"""Configuration loader for Jira Dev Metrics."""

import logging
import os.path

import yaml

from ..common_constants import (
    CHART_FILENAME_KEYS,
    COMMIT_REFERENCE_OLDEST,
    COMMIT_REFERENCES,
    DATA_FILENAME_KEYS,
    DEFAULT_IN_PROGRESS_CATEGORY,
    DEFAULT_STATUS_CATEGORIES,
)
from ..utils import parse_timestamp
from .exceptions import ConfigError
from .type_utils import (
    expand_key,
    force_choice,
    force_date,
    force_int,
    force_list,
)
from .yaml_utils import ordered_load

logger = logging.getLogger(__name__)

SOURCE_TYPES = ["files"]
SCOPE_KEYS = ["project", "board", "since", "until", "sprint"]


def _create_default_options():
    """Create default options dictionary."""
    settings = {
        "scope": {key: None for key in SCOPE_KEYS},
        "status_categories": list(DEFAULT_STATUS_CATEGORIES),
        "in_progress_category": DEFAULT_IN_PROGRESS_CATEGORY,
        "commit_reference": COMMIT_REFERENCE_OLDEST,
        "max_results": None,
        "verbose": False,
        "date_format": "%Y-%m-%d",
    }
    for key in DATA_FILENAME_KEYS + CHART_FILENAME_KEYS:
        settings[key] = None
    for key in CHART_FILENAME_KEYS:
        settings[f"{key}_title"] = None

    return {
        "source": {
            "type": "files",
            "directory": None,
        },
        "settings": settings,
    }


def _parse_source_config(config, options, cwd):
    """Parse source configuration."""
    if "source" not in config:
        return

    source_config = config["source"]
    source_options = options["source"]

    if "type" in source_config:
        source_options["type"] = force_choice(
            "type", source_config["type"], SOURCE_TYPES
        )

    if "directory" in source_config:
        directory = str(source_config["directory"])
        if cwd is not None and not os.path.isabs(directory):
            directory = os.path.join(cwd, directory)
        source_options["directory"] = os.path.normpath(directory)

    if expand_key("max_results") in source_config:
        options["settings"]["max_results"] = force_int(
            "max_results", source_config[expand_key("max_results")]
        )


def _parse_scope_config(config, options):
    """Parse the request scope: project, board, date range and sprint."""
    if "scope" not in config:
        return

    scope_config = config["scope"]
    scope = options["settings"]["scope"]

    for key in ("project", "board", "sprint"):
        if key in scope_config and scope_config[key] is not None:
            scope[key] = str(scope_config[key])

    for key in ("since", "until"):
        if key in scope_config and scope_config[key] is not None:
            scope[key] = parse_timestamp(force_date(key, scope_config[key]))

    if (
        scope["since"] is not None
        and scope["until"] is not None
        and scope["since"] > scope["until"]
    ):
        raise ConfigError(
            f"`Since` ({scope['since']}) must not be after `Until` ({scope['until']})"
        )


def _parse_status_config(config, options):
    """Parse status categories and the in-progress category."""
    settings = options["settings"]

    if expand_key("status_categories") in config:
        settings["status_categories"] = [
            str(c) for c in force_list(config[expand_key("status_categories")])
        ]

    if expand_key("in_progress_category") in config:
        settings["in_progress_category"] = str(
            config[expand_key("in_progress_category")]
        )


def _validate_status_config(options):
    settings = options["settings"]
    if settings["in_progress_category"] not in settings["status_categories"]:
        raise ConfigError(
            f"`In progress category` ({settings['in_progress_category']}) "
            f"must exist in `Status categories`: {settings['status_categories']}"
        )


def _parse_output_config(config, options):
    """Parse output configuration."""
    if "output" not in config:
        return

    output_config = config["output"]
    settings = options["settings"]

    if expand_key("output_directory") in output_config:
        options["output_directory"] = output_config[expand_key("output_directory")]

    if expand_key("commit_reference") in output_config:
        settings["commit_reference"] = force_choice(
            "commit_reference",
            output_config[expand_key("commit_reference")],
            COMMIT_REFERENCES,
        )

    _parse_filename_values(output_config, settings)
    _parse_filename_list_values(output_config, settings)
    _parse_string_values(output_config, settings)


def _parse_filename_values(output_config, settings):
    """Parse filename values from output config."""
    for key in CHART_FILENAME_KEYS:
        if expand_key(key) in output_config:
            settings[key] = os.path.basename(output_config[expand_key(key)])


def _parse_filename_list_values(output_config, settings):
    """Parse filename list values from output config."""
    for key in DATA_FILENAME_KEYS:
        if expand_key(key) in output_config:
            settings[key] = list(
                map(
                    os.path.basename,
                    force_list(output_config[expand_key(key)]),
                )
            )


def _parse_string_values(output_config, settings):
    """Parse string values from output config."""
    string_keys = ["date_format"] + [f"{key}_title" for key in CHART_FILENAME_KEYS]

    for key in string_keys:
        if expand_key(key) in output_config:
            settings[key] = str(output_config[expand_key(key)])


def config_to_options(data, cwd=None, extended=False, _visited_files=None):
    """
    Parse YAML config data and return options dict.
    """
    if _visited_files is None:
        _visited_files = set()

    try:
        config = ordered_load(data, yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise ConfigError("Unable to parse YAML configuration file.") from e

    if config is None:
        raise ConfigError("Configuration file is empty") from None

    options = _create_default_options()

    if "extends" in config:
        if cwd is None:
            raise ConfigError("`extends` is not supported here.")

        extends_filename = os.path.abspath(
            os.path.normpath(
                os.path.join(cwd, config["extends"].replace("/", os.path.sep))
            )
        )

        if not os.path.exists(extends_filename):
            raise ConfigError(
                f"File `{extends_filename}` referenced in `extends` not found."
            ) from None

        if extends_filename in _visited_files:
            raise ConfigError(
                f"Circular extends reference detected: {extends_filename}"
            ) from None

        _visited_files.add(extends_filename)

        logger.debug("Extending file %s", extends_filename)
        with open(extends_filename, encoding="utf-8") as extends_file:
            options = config_to_options(
                extends_file.read(),
                cwd=os.path.dirname(extends_filename),
                extended=True,
                _visited_files=_visited_files,
            )

    _parse_source_config(config, options, cwd)
    _parse_scope_config(config, options)
    _parse_status_config(config, options)
    _parse_output_config(config, options)

    if not extended:
        _validate_status_config(options)

        if options["source"]["directory"] is None:
            logger.warning(
                "No `Directory` found in the `Source` section. "
                "Pass --source-dir or set DEV_METRICS_SOURCE_DIR."
            )
        if options["settings"]["scope"]["project"] is None:
            logger.warning(
                "No `Project` found in the `Scope` section. "
                "The first project in the source will be used."
            )

    return options
