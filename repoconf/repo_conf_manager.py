"""Loading and bookkeeping of repo files and the repositories they define."""

import logging
from pathlib import Path
from typing import Any

import yaml

from repoconf.config import REPO_FILE_SUFFIX, get_repos_dir
from repoconf.errors import RepoIOError
from repoconf.keyfile import load_multiline_keyfile
from repoconf.models import IpResolve, RepoConf, RepoFile

logger = logging.getLogger(__name__)


class RepoConfs:
    """Collection of loaded repo files and their repositories.

    Files are kept in load order and repositories in the order they were
    discovered across all files. The same repo id may appear in several
    files; each occurrence is a separate RepoConf reading its own file.

    Attributes:
        files: Loaded repo files
        repos: Repositories found in the loaded files
    """

    def __init__(self) -> None:
        self.files: list[RepoFile] = []
        self.repos: list[RepoConf] = []

    def load_file(self, path: str | Path) -> RepoFile:
        """Load a single repo file.

        A file that is already loaded is not parsed again.

        Args:
            path: Path to the repo file

        Returns:
            RepoFile for the path

        Raises:
            RepoIOError: If the file cannot be read
            RepoSyntaxError: If the file does not parse
        """
        for repofile in self.files:
            if Path(repofile.path).resolve() == Path(path).resolve():
                logger.warning(f"Repo file {path} is already loaded, skipping")
                return repofile

        keyfile = load_multiline_keyfile(path)
        repofile = RepoFile(path=str(path), keyfile=keyfile)
        self.files.append(repofile)

        groups = repofile.groups()
        for group in groups:
            self.repos.append(RepoConf(id=group, file=repofile))

        logger.info(f"Loaded repo file {path} with {len(groups)} repos")
        return repofile

    def load_dir(self, path: str | Path | None = None) -> None:
        """Load every repo file found directly in a directory.

        Files are loaded in the order the directory listing yields them.
        Loading stops at the first file that fails; files loaded before
        it stay loaded.

        Args:
            path: Directory to scan. Defaults to the configured repos
                directory (REPOCONF_REPOS_DIR, /etc/yum.repos.d).

        Raises:
            RepoIOError: If the directory or one of its repo files cannot be read
            RepoSyntaxError: If one of the repo files does not parse
        """
        directory = Path(path) if path is not None else Path(get_repos_dir())
        logger.info(f"Loading repo files from {directory}")

        try:
            entries = list(directory.iterdir())
        except OSError as e:
            logger.error(f"Cannot open dir {directory}: {e}")
            raise RepoIOError(str(directory), e.strerror or str(e)) from e

        for entry in entries:
            if not entry.name.endswith(REPO_FILE_SUFFIX) or entry.is_dir():
                continue
            self.load_file(entry)

    def get_list(self) -> list[RepoConf]:
        """Repositories of all loaded files, in discovery order."""
        return list(self.repos)

    def get_repo(self, repo_id: str) -> RepoConf | None:
        """First loaded repository with the given id, or None."""
        for repo in self.repos:
            if repo.id == repo_id:
                return repo
        return None

    def save(self) -> None:
        """Write every loaded repo file back to its path.

        Raises:
            RepoIOError: If a file cannot be written
        """
        for repofile in self.files:
            repofile.save()

    def dump(self) -> str:
        """Render every repository and its option values as YAML.

        Raises:
            InvalidValueError: If a stored value does not fit its option
        """
        documents = []
        for repo in self.repos:
            entry: dict[str, Any] = {"id": repo.id, "file": repo.file.path}
            for key, value in repo.snapshot().items():
                entry[key] = value.value if isinstance(value, IpResolve) else value
            documents.append(entry)

        return yaml.safe_dump(documents, sort_keys=False, default_flow_style=False)
