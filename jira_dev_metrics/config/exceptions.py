"""Configuration exceptions for Jira Dev Metrics."""


class ConfigError(Exception):
    """
    Exception raised for errors in the configuration.
    """
