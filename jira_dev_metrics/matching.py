"""Association of commits and pull requests with issues.

A commit or pull request belongs to an issue when its title contains the
issue key. Matching is a plain, case-sensitive substring test: keys are never
compiled into a regular expression, so keys containing metacharacters match
literally. No uniqueness is enforced; when one key is a substring of another
(`PROJ-1` and `PROJ-12`) both issues match the longer key's commits.
"""

from .common_constants import COMMIT_REFERENCE_NEWEST, COMMIT_REFERENCE_OLDEST


class IssueKeyMatcher:
    """Match titles against a fixed set of issue keys."""

    def __init__(self, keys):
        # dict.fromkeys keeps the first-seen order while dropping duplicates
        self.keys = tuple(dict.fromkeys(k for k in keys if k))

    def __repr__(self):
        return f"<IssueKeyMatcher keys={len(self.keys)}>"

    def __len__(self):
        return len(self.keys)

    def matching_keys(self, title):
        """Return the keys that occur in `title`, in key order."""
        return [key for key in self.keys if key in title]

    def matches(self, title):
        """Return True if any key occurs in `title`."""
        return any(key in title for key in self.keys)


def title_mentions(title, key):
    """Return True if `title` contains the issue `key`."""
    return key in title


def match_commits(key, commits):
    """Return the commits mentioning `key`, newest first."""
    return sorted(
        (c for c in commits if title_mentions(c.title, key)),
        key=lambda c: c.date,
        reverse=True,
    )


def select_reference_commit(matched, reference=COMMIT_REFERENCE_OLDEST):
    """Pick the commit used to time the `commits` stage.

    `matched` is ordered newest first, as returned by `match_commits`. The
    default takes the tail of that list, which is the oldest matching commit;
    dashboards built on this data have always reported that commit. Pass
    `reference="newest"` to use the most recent commit instead.
    """
    if not matched:
        return None
    if reference == COMMIT_REFERENCE_OLDEST:
        return matched[-1]
    if reference == COMMIT_REFERENCE_NEWEST:
        return matched[0]
    raise ValueError(f"Unknown commit reference `{reference}`")


def match_pull_requests(key, pulls):
    """Return the closed pull requests mentioning `key`, oldest first."""
    return sorted(
        (
            p
            for p in pulls
            if title_mentions(p.title, key) and p.closed_at is not None
        ),
        key=lambda p: p.created_at,
    )
