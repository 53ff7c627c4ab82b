import logging
import subprocess
from datetime import date
from pathlib import Path

from git_attribution.domain.models import AuthoredCommit, NumstatEntry, QueryResult

logger = logging.getLogger(__name__)

# Empty-tree hash in SHA-1 repositories; used when git cannot compute one.
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class GitCliReader:
    def __init__(self, repo_path: str) -> None:
        path = Path(repo_path).resolve()
        # .git may be a file for worktrees and submodules
        if not (path / ".git").exists():
            raise ValueError(f"Not a git repository: {path}")
        self._path = str(path)
        self._empty_tree: str | None = None

    @property
    def path(self) -> str:
        return self._path

    def _run(self, *args: str, stdin: str | None = None) -> QueryResult:
        command = ["git", "-C", self._path, *args]
        try:
            # Paths and file contents are not guaranteed to be UTF-8
            result = subprocess.run(
                command,
                input=stdin,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.warning("git query could not start: %s (%s)", " ".join(args), e)
            return QueryResult(ok=False, error=str(e))
        if result.returncode != 0:
            error = result.stderr.strip()
            logger.warning(
                "git query failed (exit %d): %s: %s",
                result.returncode, " ".join(args), error,
            )
            return QueryResult(ok=False, error=error)
        output = result.stdout.strip()
        if not output:
            logger.debug("git query returned no output: %s", " ".join(args))
        return QueryResult(ok=True, output=output)

    def authored_commits(
        self,
        author_pattern: str,
        since: date,
        until: date,
        ignore_case: bool = False,
    ) -> list[AuthoredCommit]:
        """Commits whose author name contains *author_pattern* within the window.

        The window covers whole days: ``since`` 00:00:00 through ``until``
        23:59:59, in the timezone git resolves for the repository.
        """
        args = [
            "log",
            "--fixed-strings",
            f"--author={author_pattern}",
            f"--since={since.isoformat()} 00:00:00",
            f"--until={until.isoformat()} 23:59:59",
            "--format=%H%x09%an",
        ]
        if ignore_case:
            args.insert(1, "--regexp-ignore-case")
        return _parse_log(self._run(*args).output)

    def changed_files(self, commit: str) -> list[str]:
        output = self._run(
            "-c", "core.quotePath=false", "show", "--format=", "--name-only", commit,
        ).output
        return [line.strip() for line in output.splitlines() if line.strip()]

    def file_diff(self, commit: str, file_path: str) -> str:
        """Zero-context diff of *file_path* between *commit*'s first parent and *commit*."""
        parent = self._first_parent(commit)
        if parent is None:
            return ""
        return self._run(
            "diff", "--no-color", "--no-ext-diff", "-U0",
            parent, commit, "--", file_path,
        ).output

    def numstat(self, commit: str) -> list[NumstatEntry]:
        return _parse_numstat(self._run(
            "-c", "core.quotePath=false", "show", "--format=", "--numstat", commit,
        ).output)

    def _first_parent(self, commit: str) -> str | None:
        result = self._run("rev-list", "--parents", "-n", "1", commit)
        if not result.ok or not result.output:
            return None
        # Format: <commit> [<parent> ...]
        parts = result.output.split()
        return parts[1] if len(parts) > 1 else self.empty_tree()

    def empty_tree(self) -> str:
        """Hash of the empty tree in this repository's object format.

        Root commits are diffed against it. SHA-256 repositories use a
        different hash, so it is asked from git once and cached.
        """
        if self._empty_tree is None:
            result = self._run("hash-object", "-t", "tree", "--stdin", stdin="")
            self._empty_tree = result.output if result.ok and result.output else EMPTY_TREE
        return self._empty_tree


def _parse_log(output: str) -> list[AuthoredCommit]:
    commits: list[AuthoredCommit] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        commit_hash, _, author_name = line.partition("\t")
        commits.append(AuthoredCommit(commit_hash=commit_hash, author_name=author_name))
    return commits


def _parse_count(value: str) -> int | None:
    # Binary files show "-" for added/deleted
    return int(value) if value.isdigit() and value.isascii() else None


def _parse_numstat(output: str) -> list[NumstatEntry]:
    entries: list[NumstatEntry] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        # numstat line: <added>\t<deleted>\t<file>
        parts = line.split("\t", 2)
        if len(parts) != 3:
            continue
        added_str, deleted_str, file_path = parts
        entries.append(
            NumstatEntry(
                added=_parse_count(added_str),
                removed=_parse_count(deleted_str),
                file_path=file_path,
            )
        )
    return entries
