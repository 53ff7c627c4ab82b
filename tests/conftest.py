import os
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import pytest

JUNE_15 = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository."""
    repo = tmp_path / "repo"
    subprocess.run(
        ["git", "init", str(repo)],
        capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "-C", str(repo), "config", "user.name", "Test User"],
        capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "-C", str(repo), "config", "user.email", "test@example.com"],
        capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "-C", str(repo), "config", "commit.gpgsign", "false"],
        capture_output=True, check=True,
    )
    return repo


def commit_files(
    repo: Path,
    files: dict[str, str | bytes],
    message: str,
    date: datetime = JUNE_15,
    author_name: str = "Test User",
    author_email: str = "test@example.com",
) -> str:
    """Create a single commit touching *files* at a fixed date; return its hash."""
    for file_path, content in files.items():
        full_path = repo / file_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            full_path.write_bytes(content)
        else:
            full_path.write_text(content)

    date_str = date.strftime("%Y-%m-%dT%H:%M:%S %z")

    for file_path in files:
        subprocess.run(
            ["git", "-C", str(repo), "add", file_path],
            capture_output=True, check=True,
        )

    env = {
        **os.environ,
        "GIT_AUTHOR_DATE": date_str,
        "GIT_COMMITTER_DATE": date_str,
        "GIT_AUTHOR_NAME": author_name,
        "GIT_AUTHOR_EMAIL": author_email,
        "GIT_COMMITTER_NAME": author_name,
        "GIT_COMMITTER_EMAIL": author_email,
    }
    subprocess.run(
        ["git", "-C", str(repo), "commit", "-m", message],
        capture_output=True, check=True,
        env=env,
    )
    result = subprocess.run(
        ["git", "-C", str(repo), "rev-parse", "HEAD"],
        capture_output=True, check=True, text=True,
    )
    return result.stdout.strip()


def commit_file(
    repo: Path,
    file_path: str,
    content: str | bytes,
    message: str,
    date: datetime = JUNE_15,
    author_name: str = "Test User",
    author_email: str = "test@example.com",
) -> str:
    return commit_files(
        repo, {file_path: content}, message,
        date=date, author_name=author_name, author_email=author_email,
    )


SINGLE_TEST = (
    "test('x', () => {\n"
    "  expect(1).toBe(1);\n"
    "});\n"
)


@pytest.fixture
def jane_repo(tmp_git_repo: Path) -> Path:
    """One commit by Jane Doe on 2025-06-15 adding a three-line test file."""
    commit_file(
        tmp_git_repo, "a.test.js", SINGLE_TEST, "Add test",
        author_name="Jane Doe", author_email="jane@example.com",
    )
    return tmp_git_repo


# Latin-1 bytes in a comment; not valid UTF-8
LATIN1_TEST = b"// caf\xe9\n" + SINGLE_TEST.encode("ascii")


@pytest.fixture
def latin1_repo(tmp_git_repo: Path) -> Path:
    """One commit by Jane Doe on 2025-06-15 adding a Latin-1 encoded test file."""
    commit_file(
        tmp_git_repo, "a.test.js", LATIN1_TEST, "Add test",
        author_name="Jane Doe", author_email="jane@example.com",
    )
    return tmp_git_repo

@pytest.fixture
def attribution_repo(tmp_git_repo: Path) -> Path:
    """A repo where Jane edits one of two tests that someone else wrote.

    Timeline:
    - 2025-05-10 Bob: src/calc.test.ts with two tests, src/calc.ts
    - 2025-06-10 Jane: edits the body of the second test, adds README line
    - 2025-07-05 Jane: adds a third test (outside the June window)
    """
    calc_test = (
        "import { add } from './calc';\n"
        "\n"
        "describe('add', () => {\n"
        "  it('adds', () => {\n"
        "    expect(add(1, 2)).toBe(3);\n"
        "  });\n"
        "\n"
        "  it('adds negatives', () => {\n"
        "    expect(add(-1, -2)).toBe(-3);\n"
        "  });\n"
        "});\n"
    )
    commit_files(
        tmp_git_repo,
        {
            "src/calc.test.ts": calc_test,
            "src/calc.ts": "export const add = (a: number, b: number) => a + b;\n",
            "README.md": "# Calc\n",
        },
        "Bob: add calc",
        date=datetime(2025, 5, 10, 12, 0, 0, tzinfo=timezone.utc),
        author_name="Bob", author_email="bob@example.com",
    )
    june_test = calc_test.replace(
        "expect(add(-1, -2)).toBe(-3);",
        "expect(add(-1, -2)).toEqual(-3);",
    )
    commit_files(
        tmp_git_repo,
        {
            "src/calc.test.ts": june_test,
            "README.md": "# Calc\n\nAdds numbers.\n",
        },
        "Jane: tighten negative test",
        date=datetime(2025, 6, 10, 12, 0, 0, tzinfo=timezone.utc),
        author_name="Jane Doe", author_email="jane@example.com",
    )
    july_test = june_test[: -len("});\n")] + (
        "\n"
        "  it('adds zero', () => {\n"
        "    expect(add(0, 0)).toBe(0);\n"
        "  });\n"
        "});\n"
    )
    commit_file(
        tmp_git_repo, "src/calc.test.ts", july_test, "Jane: add zero test",
        date=datetime(2025, 7, 5, 12, 0, 0, tzinfo=timezone.utc),
        author_name="Jane Doe", author_email="jane@example.com",
    )
    return tmp_git_repo


CONFIG_VARS = ("REPO_PATH", "AUTHOR", "SINCE_DATE", "UNTIL_DATE")


@pytest.fixture
def clean_env(monkeypatch, tmp_path: Path):
    """Unset configuration variables and run from an empty directory.

    Variables are restored after the test even when load_dotenv sets them.
    """
    for name in CONFIG_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return monkeypatch
