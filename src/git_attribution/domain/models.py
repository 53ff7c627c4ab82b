from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path


class ConfigError(ValueError):
    """Required configuration is missing or malformed."""


class SourceParseError(ValueError):
    """A test file could not be parsed as JavaScript/TypeScript."""

    def __init__(self, file_path: str, message: str) -> None:
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path
        self.reason = message


@dataclass(frozen=True)
class AnalysisConfig:
    """Everything one attribution run needs, resolved once at startup."""

    repo_path: str
    author: str
    since: date
    until: date
    isolate_parse_errors: bool = False


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a single git subprocess call."""

    ok: bool
    output: str = ""
    error: str = ""


@dataclass(frozen=True)
class AuthoredCommit:
    commit_hash: str
    author_name: str


@dataclass(frozen=True)
class NumstatEntry:
    """A single file's line counts within one commit.

    ``added``/``removed`` are None when git printed a non-numeric marker
    (binary files show ``-``).
    """

    added: int | None
    removed: int | None
    file_path: str


@dataclass(frozen=True)
class LineRange:
    start: int  # 1-based
    end: int    # inclusive

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"Invalid line range: {self.start}-{self.end}")

    def contains(self, line: int) -> bool:
        return self.start <= line <= self.end


@dataclass(frozen=True)
class TestCase:
    """One ``test``/``it`` call expression and the lines it spans."""

    __test__ = False

    kind: str              # callee text, e.g. "it" or "test.skip"
    lines: LineRange

    @property
    def start(self) -> int:
        return self.lines.start

    @property
    def end(self) -> int:
        return self.lines.end


@dataclass(frozen=True)
class FileAttribution:
    """Test cases of one test file and which of them the author touched."""

    file_path: str
    test_cases: list[TestCase]
    changed_lines: list[int]
    updated: list[TestCase]  # subset of test_cases, source order


@dataclass(frozen=True)
class SkippedFile:
    file_path: str
    reason: str


@dataclass(frozen=True)
class AttributionReport:
    """Added-line and test-case attribution for one author in one window."""

    repo_path: str
    author: str
    since: date
    until: date
    commits: list[str]
    total_lines_added: int
    files: list[FileAttribution] = field(default_factory=list)
    skipped_files: list[SkippedFile] = field(default_factory=list)

    @property
    def updated_test_case_count(self) -> int:
        return sum(len(f.updated) for f in self.files)

    @property
    def test_case_count(self) -> int:
        return sum(len(f.test_cases) for f in self.files)

    @property
    def test_file_count(self) -> int:
        return len(self.files) + len(self.skipped_files)


def repo_file(repo_path: str, file_path: str) -> Path:
    """Absolute working-tree location of a repository-relative path."""
    return Path(repo_path) / file_path
