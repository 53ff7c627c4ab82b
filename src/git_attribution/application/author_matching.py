"""Author-name matching strategies for collecting a contributor's commits.

Display names rarely match git metadata exactly, so commits are collected
by an ordered list of strategies whose candidate sets are unioned.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Protocol

from git_attribution.domain.ports import GitRepository

logger = logging.getLogger(__name__)


class AuthorMatchStrategy(Protocol):
    name: str

    def candidates(
        self, repo: GitRepository, author: str, since: date, until: date,
    ) -> set[str]: ...


class ExactNameStrategy:
    """Substring match on the display name as given."""

    name = "exact"

    def candidates(
        self, repo: GitRepository, author: str, since: date, until: date,
    ) -> set[str]:
        return {c.commit_hash for c in repo.authored_commits(author, since, until)}


class ReversedNameStrategy:
    """Match the ``Last, First`` spelling of the display name."""

    name = "reversed"

    def candidates(
        self, repo: GitRepository, author: str, since: date, until: date,
    ) -> set[str]:
        reversed_name = reverse_name(author)
        if reversed_name is None:
            return set()
        return {
            c.commit_hash
            for c in repo.authored_commits(reversed_name, since, until)
        }


class FirstTokenStrategy:
    """Loose match on the first name token, keeping only authors that
    also contain the last token."""

    name = "first-token"

    def candidates(
        self, repo: GitRepository, author: str, since: date, until: date,
    ) -> set[str]:
        tokens = author.split()
        if len(tokens) < 2:
            return set()
        first, last = tokens[0].lower(), tokens[-1].lower()
        found: set[str] = set()
        for commit in repo.authored_commits(tokens[0], since, until, ignore_case=True):
            name = commit.author_name.lower()
            if first in name and last in name:
                found.add(commit.commit_hash)
            else:
                logger.debug(
                    "Rejected %s by %r: not a match for %r",
                    commit.commit_hash, commit.author_name, author,
                )
        return found


DEFAULT_STRATEGIES: tuple[AuthorMatchStrategy, ...] = (
    ExactNameStrategy(),
    ReversedNameStrategy(),
    FirstTokenStrategy(),
)


def reverse_name(author: str) -> str | None:
    """'Jane Q Doe' -> 'Doe, Jane Q'. Single-token names have no reversal."""
    tokens = author.split()
    if len(tokens) < 2:
        return None
    return f"{tokens[-1]}, {' '.join(tokens[:-1])}"


def collect_commits(
    repo: GitRepository,
    author: str,
    since: date,
    until: date,
    strategies: tuple[AuthorMatchStrategy, ...] = DEFAULT_STRATEGIES,
) -> list[str]:
    """Union of every strategy's commits, de-duplicated in discovery order."""
    seen: dict[str, None] = {}
    for strategy in strategies:
        found = strategy.candidates(repo, author, since, until)
        logger.info("Author strategy %s matched %d commit(s)", strategy.name, len(found))
        for commit_hash in sorted(found):
            seen.setdefault(commit_hash, None)
    return list(seen)
