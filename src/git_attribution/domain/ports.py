from __future__ import annotations

from datetime import date
from typing import Protocol

from git_attribution.domain.models import AuthoredCommit, NumstatEntry


class GitRepository(Protocol):
    """Read-only history queries the attribution pipeline depends on.

    Implementations never raise for a failed query; they return an empty
    result instead.
    """

    def authored_commits(
        self,
        author_pattern: str,
        since: date,
        until: date,
        ignore_case: bool = False,
    ) -> list[AuthoredCommit]: ...

    def changed_files(self, commit: str) -> list[str]: ...

    def file_diff(self, commit: str, file_path: str) -> str: ...

    def numstat(self, commit: str) -> list[NumstatEntry]: ...
