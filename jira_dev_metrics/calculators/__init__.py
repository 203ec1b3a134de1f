"""Dashboard card calculators for Jira Dev Metrics."""
