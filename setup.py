"""Package configuration for jira-dev-metrics.

This file defines installation metadata and console entry points.
"""

import os

import setuptools

# Defer reading README/requirements until setup is actually executed so that
# importing this module has no side effects.


def _read_requirements(here, filename):
    """Read a requirements file, skipping comments and nested `-r` includes."""
    try:
        with open(os.path.join(here, filename), encoding="utf-8") as f:
            return [
                line.strip()
                for line in f.read().splitlines()
                if line.strip()
                and not line.strip().startswith("#")
                and not line.strip().startswith("-r ")
            ]
    except OSError:
        return []


def main():
    """Entrypoint for invoking setuptools.setup with package metadata."""

    here = os.path.abspath(os.path.dirname(__file__))

    try:
        with open(os.path.join(here, "README.md"), encoding="utf-8") as f:
            long_description = f.read()
    except OSError:
        long_description = ""

    setuptools.setup(
        name="jira-dev-metrics",
        version="0.1.0",
        description=(
            "Development progress metrics (stage times, commit and pull request "
            "correlation, throughput) for project dashboards"
        ),
        long_description=long_description,
        long_description_content_type="text/markdown",
        license="MIT",
        keywords="agile jira git metrics dashboard",
        packages=setuptools.find_packages(exclude=["contrib", "docs", "tests*"]),
        install_requires=_read_requirements(here, "requirements-prod.txt"),
        extras_require={"test": _read_requirements(here, "requirements-test.txt")},
        python_requires=">=3.9",
        include_package_data=True,
        entry_points={
            "console_scripts": [
                "jira-dev-metrics=jira_dev_metrics.cli:main",
            ],
        },
    )


if __name__ == "__main__":
    main()
