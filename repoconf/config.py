"""Configuration and logging setup for the repository configuration store."""

import logging
import os
import sys


def setup_logging(level: str | None = None) -> None:
    """Route repoconf log records to stdout.

    The package itself only creates module loggers and never configures
    handlers; applications and scripts that load repo files call this once
    at startup to see the load, save and option-change messages.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Defaults to
            the LOG_LEVEL environment variable, then INFO.

    Raises:
        ValueError: If the level name is not a logging level
    """
    log_level = (level or get_env_var(ENV_LOG_LEVEL, "INFO")).upper()
    if log_level not in logging.getLevelNamesMapping():
        raise ValueError(f"Unknown log level {log_level}")

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def get_env_var(name: str, default: str | None = None, required: bool = False) -> str:
    """Get environment variable with optional default and validation.

    Args:
        name: Environment variable name
        default: Default value if not set
        required: Whether the variable is required

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set
    """
    value = os.getenv(name, default)

    if required and not value:
        raise ValueError(f"Required environment variable {name} is not set")

    return value or ""


def get_repos_dir() -> str:
    """Directory scanned by RepoConfs.load_dir() when no path is given."""
    return get_env_var(ENV_REPOS_DIR, DEFAULT_REPOS_DIR)


# Environment variable names
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_REPOS_DIR = "REPOCONF_REPOS_DIR"

DEFAULT_REPOS_DIR = "/etc/yum.repos.d"
REPO_FILE_SUFFIX = ".repo"
