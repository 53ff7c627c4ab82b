import logging

import pathspec

from git_attribution.application.author_matching import collect_commits
from git_attribution.domain.models import (
    AnalysisConfig,
    AttributionReport,
    FileAttribution,
    SkippedFile,
    SourceParseError,
    TestCase,
    repo_file,
)
from git_attribution.domain.ports import GitRepository
from git_attribution.infrastructure.diff_parser import parse_added_lines
from git_attribution.infrastructure.test_block_extractor import read_test_blocks

logger = logging.getLogger(__name__)

TEST_FILE_PATTERNS = (
    "**/*.spec.js",
    "**/*.test.js",
    "**/*.test.tsx",
    "**/*.test.jsx",
    "**/*.test.ts",
)

_TEST_FILE_SPEC = pathspec.PathSpec.from_lines("gitwildmatch", TEST_FILE_PATTERNS)


def is_test_file(path: str) -> bool:
    """Match *path* against TEST_FILE_PATTERNS.

    Wildcards do not match dot-prefixed segments, so files under hidden
    directories and hidden files themselves are never test files. A
    directory named like a test file does not make its contents match.
    """
    segments = [s for s in path.split("/") if s]
    if not segments or any(s.startswith(".") for s in segments):
        return False
    return _TEST_FILE_SPEC.match_file(path) and _TEST_FILE_SPEC.match_file(segments[-1])


def files_changed_by_commits(repo: GitRepository, commits: list[str]) -> list[str]:
    """Union of files touched by *commits*, in first-seen order."""
    files: dict[str, None] = {}
    for commit in commits:
        for file_path in repo.changed_files(commit):
            file_path = file_path.strip()
            if file_path:
                files.setdefault(file_path, None)
    return list(files)


def changed_lines_by_file(
    repo: GitRepository, file_path: str, commits: list[str],
) -> list[int]:
    """New-file line numbers *commits* added to *file_path*.

    Lines are concatenated across commits, not de-duplicated; the result is
    only used for membership tests.
    """
    lines: list[int] = []
    for commit in commits:
        lines.extend(parse_added_lines(repo.file_diff(commit, file_path)))
    return lines


def updated_test_cases(
    test_cases: list[TestCase], changed_lines: list[int],
) -> list[TestCase]:
    """Test cases with at least one changed line inside their range (inclusive)."""
    changed = set(changed_lines)
    return [
        tc for tc in test_cases
        if any(tc.lines.contains(line) for line in changed)
    ]


def count_added_lines(repo: GitRepository, commits: list[str]) -> int:
    """Sum of numstat added counts; binary and malformed entries count 0."""
    total = 0
    for commit in commits:
        total += sum(
            entry.added for entry in repo.numstat(commit)
            if entry.added is not None
        )
    return total


def attribute_file(
    repo: GitRepository, repo_path: str, file_path: str, commits: list[str],
) -> FileAttribution:
    test_cases = read_test_blocks(repo_file(repo_path, file_path))
    changed = changed_lines_by_file(repo, file_path, commits)
    updated = updated_test_cases(test_cases, changed)
    logger.debug(
        "%s: %d test case(s), %d changed line(s), %d updated",
        file_path, len(test_cases), len(changed), len(updated),
    )
    return FileAttribution(
        file_path=file_path,
        test_cases=test_cases,
        changed_lines=changed,
        updated=updated,
    )


def analyze_test_attribution(
    repo: GitRepository, config: AnalysisConfig,
) -> AttributionReport:
    """Count lines added and test cases touched by ``config.author`` in the window.

    Zero commits or zero test files short-circuit to an empty report. A test
    file that fails to parse aborts the run with SourceParseError unless
    ``config.isolate_parse_errors`` is set, in which case it is recorded in
    ``skipped_files``.
    """
    commits = collect_commits(repo, config.author, config.since, config.until)
    if not commits:
        logger.info("No commits by %r between %s and %s", config.author, config.since, config.until)
        return AttributionReport(
            repo_path=config.repo_path,
            author=config.author,
            since=config.since,
            until=config.until,
            commits=[],
            total_lines_added=0,
        )

    total_lines = count_added_lines(repo, commits)
    test_files = [f for f in files_changed_by_commits(repo, commits) if is_test_file(f)]

    files: list[FileAttribution] = []
    skipped: list[SkippedFile] = []
    for file_path in test_files:
        try:
            files.append(attribute_file(repo, config.repo_path, file_path, commits))
        except SourceParseError as e:
            if not config.isolate_parse_errors:
                raise
            logger.warning("Skipping unparseable test file %s", e)
            skipped.append(SkippedFile(file_path=file_path, reason=e.reason))

    return AttributionReport(
        repo_path=config.repo_path,
        author=config.author,
        since=config.since,
        until=config.until,
        commits=commits,
        total_lines_added=total_lines,
        files=files,
        skipped_files=skipped,
    )
