"""Resolve an AnalysisConfig from the environment, a .env file and CLI overrides."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from datetime import date

from dotenv import load_dotenv

from git_attribution.domain.models import AnalysisConfig, ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SINCE = "2025-06-01"
DEFAULT_UNTIL = "2025-06-30"


def _parse_date(name: str, value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}")


def load_config(
    repo_path: str | None = None,
    author: str | None = None,
    isolate_parse_errors: bool = False,
    env_file: str | None = ".env",
    environ: Mapping[str, str] | None = None,
) -> AnalysisConfig:
    """Build the run configuration.

    Explicit arguments win over ``REPO_PATH``/``AUTHOR``. The window comes
    from ``SINCE_DATE``/``UNTIL_DATE`` only. Values in *env_file* never
    override variables already set in the process environment.
    """
    if env_file and environ is None:
        if load_dotenv(env_file, override=False):
            logger.debug("Loaded configuration from %s", env_file)
    env = os.environ if environ is None else environ

    repo_path = repo_path or env.get("REPO_PATH", "").strip()
    author = (author or env.get("AUTHOR", "")).strip()
    if not repo_path:
        raise ConfigError("repository path is required (argument or REPO_PATH)")
    if not author:
        raise ConfigError("author is required (--author or AUTHOR)")

    since = _parse_date("SINCE_DATE", env.get("SINCE_DATE") or DEFAULT_SINCE)
    until = _parse_date("UNTIL_DATE", env.get("UNTIL_DATE") or DEFAULT_UNTIL)
    if since > until:
        raise ConfigError(f"SINCE_DATE {since} is after UNTIL_DATE {until}")

    return AnalysisConfig(
        repo_path=repo_path,
        author=author,
        since=since,
        until=until,
        isolate_parse_errors=isolate_parse_errors,
    )
