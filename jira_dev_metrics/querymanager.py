"""Query management module for Jira Dev Metrics.

This module wraps a record source, logging every retrieval and deriving the
views the calculators need (development issues, workflow statuses).
"""

import logging

logger = logging.getLogger(__name__)


class QueryManager:
    """Manage and execute queries against a record source."""

    settings = {
        "max_results": None,
    }

    def __init__(self, source, settings=None):
        self.source = source
        self.settings = self.settings.copy()
        self.settings.update(settings or {})

    def _limit(self, records):
        max_results = self.settings.get("max_results")
        if max_results:
            logger.info("Limiting to %d results", max_results)
            return records[:max_results]
        return records

    async def get_project(self, opts):
        """Return the project in scope, or None."""
        logger.debug("Fetching project %s", opts.project)
        return await self.source.project(opts)

    async def get_board(self, opts):
        """Return the board in scope, or None."""
        logger.debug("Fetching board %s", opts.board)
        return await self.source.board(opts)

    async def get_workflows(self, opts):
        """Return the workflow status categories of the project in scope."""
        logger.debug("Fetching workflows for project %s", opts.project)
        return await self.source.workflows(opts)

    async def get_workflow_statuses(self, opts):
        """Return the names of all workflow statuses, in category order."""
        workflows = await self.get_workflows(opts)
        statuses = []
        for category in workflows:
            for status in category.workflows:
                if status.untranslated_name not in statuses:
                    statuses.append(status.untranslated_name)
        return statuses

    async def get_issues(self, opts):
        """Return the issues active in the scope of `opts`."""
        logger.info(
            "Fetching issues for project %s between %s and %s",
            opts.project,
            opts.since,
            opts.until,
        )
        try:
            issues = self._limit(await self.source.issues(opts))
        except Exception as e:
            logger.error("Unexpected error while fetching issues: %s", e)
            raise

        logger.info("Fetched %d issues", len(issues))
        if len(issues) == 0:
            logger.warning(
                "Query returned 0 issues. Check the project, sprint and date "
                "range in the `Scope` section."
            )
        return issues

    async def get_dev_issues(self, opts, in_progress_stages=None):
        """Return the issues in scope that reached development.

        An issue reached development when it has a timing for, or currently
        sits in, one of `in_progress_stages`. Without stages every issue in
        scope is returned.
        """
        issues = await self.get_issues(opts)
        if not in_progress_stages:
            return issues

        stages = set(in_progress_stages)
        dev_issues = [
            issue
            for issue in issues
            if issue.status in stages
            or any(t.status in stages for t in issue.transitions)
        ]
        logger.debug(
            "%d of %d issues reached an in-progress stage",
            len(dev_issues),
            len(issues),
        )
        return dev_issues

    async def get_commits(self, opts, matcher, git_org_name):
        """Return the commits of `git_org_name` mentioning a key of `matcher`."""
        logger.info(
            "Fetching commits in %s for %d issue keys", git_org_name, len(matcher)
        )
        commits = await self.source.commits(opts, matcher, git_org_name)
        logger.info("Fetched %d commits", len(commits))
        return commits

    async def get_pull_requests(self, opts, matcher, git_org_name):
        """Return the pull requests of `git_org_name` mentioning a key of
        `matcher`.
        """
        logger.info(
            "Fetching pull requests in %s for %d issue keys",
            git_org_name,
            len(matcher),
        )
        pulls = await self.source.pull_requests(opts, matcher, git_org_name)
        logger.info("Fetched %d pull requests", len(pulls))
        return pulls
