"""Loading and saving of multi-line repo files through configparser."""

import configparser
import io
import logging
from pathlib import Path

from repoconf.errors import RepoIOError, RepoSyntaxError

logger = logging.getLogger(__name__)


def fold_continuation_lines(text: str) -> str:
    """Fold indented continuation lines into the logical line they extend.

    Repo files allow a value to continue on following lines as long as
    those lines start with whitespace::

        baseurl = http://mirror-a/os
                  http://mirror-b/os

    Each continuation is stripped and joined to the previous line with a
    ';' separator, or appended directly when the previous line ends with
    '=' (the value starts on the next line). Tabs count as spaces. The
    result holds one ``key = value`` per line, which configparser reads
    without its own (different) multi-line rules.

    Examples:
        >>> fold_continuation_lines("k = v\\n  cont\\n")
        'k = v;cont\\n'
        >>> fold_continuation_lines("k =\\n  cont")
        'k =cont'
    """
    folded: list[str] = []

    for line in text.split("\n"):
        line = line.replace("\t", " ")

        if line.startswith(" ") and folded:
            fragment = line.strip()
            # Only add a ';' if there is already something after the '='
            if folded[-1].endswith("="):
                folded[-1] += fragment
            else:
                folded[-1] += f";{fragment}"
        else:
            folded.append(line)

    return "\n".join(folded)


def new_keyfile() -> configparser.ConfigParser:
    """Create an empty key-value store with repo file semantics.

    Keys are case-sensitive, '=' is the only delimiter, '%' is taken
    literally, and a group repeated in one file is merged into the first.
    Repo files have no DEFAULT group, so the default section name is set
    to one that no ``[header]`` line can produce.
    """
    keyfile = configparser.ConfigParser(
        delimiters=("=",),
        interpolation=None,
        strict=False,
        default_section="",
    )
    keyfile.optionxform = str  # type: ignore[assignment,method-assign]
    return keyfile


def parse_keyfile(text: str, source: str = "<string>") -> configparser.ConfigParser:
    """Fold and parse repo file text.

    Args:
        text: Raw repo file content
        source: Name used in error messages

    Returns:
        Parsed key-value store

    Raises:
        RepoSyntaxError: If the folded text is not valid grouped key-value syntax
    """
    keyfile = new_keyfile()
    try:
        keyfile.read_string(fold_continuation_lines(text), source=source)
    except configparser.Error as e:
        logger.error(f"Cannot parse key file {source}: {e}")
        raise RepoSyntaxError(source, str(e)) from e
    return keyfile


def load_multiline_keyfile(path: str | Path) -> configparser.ConfigParser:
    """Read a repo file from disk and parse it.

    Args:
        path: Path to the repo file

    Returns:
        Parsed key-value store

    Raises:
        RepoIOError: If the file cannot be read
        RepoSyntaxError: If the file is not UTF-8 or does not parse
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        logger.error(f"Cannot load content of {path}: {e}")
        raise RepoIOError(str(path), e.strerror or str(e)) from e

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.error(f"Cannot decode {path} as UTF-8: {e}")
        raise RepoSyntaxError(str(path), str(e)) from e

    return parse_keyfile(text, source=str(path))


def dump_keyfile(keyfile: configparser.ConfigParser) -> str:
    """Serialize a key-value store to repo file text."""
    buffer = io.StringIO()
    keyfile.write(buffer)
    return buffer.getvalue()


def save_keyfile(keyfile: configparser.ConfigParser, path: str | Path) -> None:
    """Write a key-value store back to a repo file.

    Raises:
        RepoIOError: If the file cannot be written
    """
    try:
        Path(path).write_text(dump_keyfile(keyfile), encoding="utf-8")
    except OSError as e:
        logger.error(f"Cannot write {path}: {e}")
        raise RepoIOError(str(path), e.strerror or str(e)) from e

    logger.info(f"Saved repo file {path}")
