"""Exceptions raised by the repository configuration store.

Every failure surfaced by repoconf derives from RepoConfError, so callers
can catch the whole family at once or pick out a single kind.
"""


class RepoConfError(Exception):
    """Base exception for repository configuration errors."""


class RepoIOError(RepoConfError):
    """Raised when a repo file or directory cannot be read or written."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot access {path}: {reason}")
        self.path = path
        self.reason = reason


class RepoSyntaxError(RepoConfError):
    """Raised when a repo file does not parse as grouped key-value text."""

    def __init__(self, path: str, diagnostic: str) -> None:
        super().__init__(f"Cannot parse key file {path}: {diagnostic}")
        self.path = path
        self.diagnostic = diagnostic


class InvalidValueError(RepoConfError, ValueError):
    """Raised when a stored value cannot be coerced to its option's kind."""

    def __init__(
        self, message: str, option: str | None = None, value: str | None = None
    ) -> None:
        super().__init__(message)
        self.option = option
        self.value = value


class MalformedValueError(InvalidValueError):
    """Raised when the key-value engine itself rejects a stored value."""


class NotSetError(RepoConfError):
    """Raised when an option without a default is requested and absent."""

    def __init__(self, option: str) -> None:
        super().__init__(f"Value of option {option} is not set")
        self.option = option


class ReadOnlyError(RepoConfError):
    """Raised on an attempt to write a read-only option."""

    def __init__(self, option: str) -> None:
        super().__init__(f"Option {option} is read only")
        self.option = option


class BadArgumentError(RepoConfError, TypeError):
    """Raised when a call gets a structurally invalid argument."""
