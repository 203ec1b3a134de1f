"""Jira Dev Metrics - development progress metrics for project dashboards.

This package matches commits and pull requests to issues, measures the time
spent at each workflow stage, and aggregates dashboard card data such as
throughput and average closed time.
"""
