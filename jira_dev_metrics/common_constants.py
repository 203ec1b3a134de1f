"""Common constants used across Jira Dev Metrics modules."""

from typing import Final, List

# Synthetic stages appended to every issue's transitions
COMMITS_STAGE: Final[str] = "commits"
PULL_REQUEST_STAGE: Final[str] = "pull request"
SYNTHETIC_STAGES: Final[List[str]] = [COMMITS_STAGE, PULL_REQUEST_STAGE]

# Jira status category keys, in board order
DEFAULT_STATUS_CATEGORIES: Final[List[str]] = ["new", "indeterminate", "done"]
DEFAULT_IN_PROGRESS_CATEGORY: Final[str] = "indeterminate"

# Which matched commit is used as the reference for commit timing
COMMIT_REFERENCE_OLDEST: Final[str] = "oldest"
COMMIT_REFERENCE_NEWEST: Final[str] = "newest"
COMMIT_REFERENCES: Final[List[str]] = [COMMIT_REFERENCE_OLDEST, COMMIT_REFERENCE_NEWEST]

# Graph granularity, chosen from the length of the requested date range
GRANULARITY_DAILY: Final[str] = "daily"
GRANULARITY_WEEKLY: Final[str] = "weekly"
GRANULARITY_MONTHLY: Final[str] = "monthly"

# Data filename keys used in config parsing
DATA_FILENAME_KEYS: Final[List[str]] = [
    "development_progress_data",
    "throughput_data",
    "transition_details_data",
    "average_closed_time_data",
    "issue_types_data",
    "sprint_activity_data",
    "heat_map_data",
    "project_info_data",
    "issue_time_data",
]

# Chart filename keys used in config parsing
CHART_FILENAME_KEYS: Final[List[str]] = [
    "development_progress_chart",
    "throughput_chart",
]
