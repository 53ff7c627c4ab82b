import argparse
import logging
import sys

from git_attribution.application.use_cases import analyze_test_attribution
from git_attribution.domain.models import ConfigError, SourceParseError
from git_attribution.infrastructure.git_cli_reader import GitCliReader
from git_attribution.interface.config import load_config


def _error_exit(msg: str) -> None:
    """Print error message to stderr and exit with code 1."""
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(1)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="git-attribution",
        description="Attribute added lines and test cases to one author",
    )
    parser.add_argument(
        "repo_path", nargs="?", default=None,
        help="Path to a local git repository (default: $REPO_PATH)",
    )
    parser.add_argument(
        "--author",
        default=None,
        metavar="NAME",
        help="Author display name (default: $AUTHOR)",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        metavar="PATH",
        help="dotenv file with REPO_PATH, AUTHOR, SINCE_DATE, UNTIL_DATE (default: .env)",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip test files that fail to parse instead of aborting",
    )
    parser.add_argument(
        "--files",
        action="store_true",
        help="Show per-file test case breakdown",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log git queries and per-file details to stderr",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(
            repo_path=args.repo_path,
            author=args.author,
            isolate_parse_errors=args.keep_going,
            env_file=args.env_file,
        )
    except ConfigError as e:
        _error_exit(str(e))

    try:
        git_reader = GitCliReader(config.repo_path)
    except ValueError as e:
        _error_exit(str(e))

    try:
        report = analyze_test_attribution(git_reader, config)
    except SourceParseError as e:
        _error_exit(f"cannot parse test file {e} (use --keep-going to skip it)")

    print(f"Repository:   {git_reader.path}")
    print(f"Author:       {report.author}")
    print(f"Window:       {report.since.isoformat()} .. {report.until.isoformat()}")
    print(f"Commits:      {len(report.commits)}")

    if not report.commits:
        print("No commits found for the specified author and date range.")
        return

    if report.test_file_count == 0:
        print("No test case files found.")
    elif args.files:
        print(f"\n--- Test Files ({report.test_file_count} files, {report.test_case_count} test cases) ---\n")
        _print_test_files(report)

    for skipped in report.skipped_files:
        print(f"Skipped {skipped.file_path}: {skipped.reason}")

    print()
    print(f"Total lines added by {report.author}: {report.total_lines_added}")
    print(f"Updated/Added Test Cases by {report.author}: {report.updated_test_case_count}")


def _print_test_files(report, limit: int = 20, max_path: int = 60) -> None:
    """Per-file table, most updated test cases first."""
    rows = sorted(report.files, key=lambda f: (-len(f.updated), f.file_path))
    if not rows:
        return

    path_width = max(min(max(len(f.file_path) for f in rows), max_path), len("File"))
    header_line = f"{'File':<{path_width}}  {'Tests':>6}  {'Updated':>8}  {'Lines':>6}"
    print(header_line)
    print("-" * len(header_line))

    for f in rows[:limit]:
        path = f.file_path
        if len(path) > path_width:
            path = "..." + path[-(path_width - 3):]
        print(
            f"{path:<{path_width}}  {len(f.test_cases):>6}  "
            f"{len(f.updated):>8}  {len(set(f.changed_lines)):>6}"
        )

    if len(rows) > limit:
        print(f"  ... and {len(rows) - limit} more files")
