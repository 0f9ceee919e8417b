"""Typed access to the options of a repository definition.

Every recognized repo option is described once in the ``OPTIONS`` registry:
the key it is stored under, the kind of value it holds and the value
reported when the key is absent. ``get_option`` and ``set_option`` dispatch
on the registered kind, so the same option always reads and writes the same
Python type:

    ============  ==========================================
    kind          Python type
    ============  ==========================================
    ID            str (read only, the group name)
    STRING        str or None
    STRING_LIST   list[str] or None
    BOOL          bool
    INT           int (signed 32-bit)
    BANDWIDTH     int (bytes, unsigned 64-bit)
    INTERVAL      int (seconds, signed 64-bit)
    IP_RESOLVE    IpResolve
    ============  ==========================================
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable

from repoconf.errors import (
    BadArgumentError,
    InvalidValueError,
    MalformedValueError,
    NotSetError,
    ReadOnlyError,
)
from repoconf.models import IpResolve, OptionKind, RepoConf
from repoconf.utils import (
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    UINT64_MAX,
    convert_bandwidth_to_bytes,
    convert_interval_to_seconds,
)

logger = logging.getLogger(__name__)


class RepoOption(Enum):
    """Options of a repository definition, valued by their key name."""

    ID = "id"
    NAME = "name"
    ENABLED = "enabled"
    BASEURL = "baseurl"
    MIRRORLIST = "mirrorlist"
    METALINK = "metalink"
    MEDIAID = "mediaid"
    GPGKEY = "gpgkey"
    GPGCAKEY = "gpgcakey"
    EXCLUDE = "exclude"
    INCLUDE = "include"
    FASTESTMIRROR = "fastestmirror"
    PROXY = "proxy"
    PROXY_USERNAME = "proxy_username"
    PROXY_PASSWORD = "proxy_password"
    USERNAME = "username"
    PASSWORD = "password"
    GPGCHECK = "gpgcheck"
    REPO_GPGCHECK = "repo_gpgcheck"
    ENABLEGROUPS = "enablegroups"
    BANDWIDTH = "bandwidth"
    THROTTLE = "throttle"
    IP_RESOLVE = "ip_resolve"
    METADATA_EXPIRE = "metadata_expire"
    COST = "cost"
    PRIORITY = "priority"
    SSLCACERT = "sslcacert"
    SSLVERIFY = "sslverify"
    SSLCLIENTCERT = "sslclientcert"
    SSLCLIENTKEY = "sslclientkey"
    DELTAREPOBASEURL = "deltarepobaseurl"


# Default of an option that has to be set explicitly
NO_DEFAULT = object()

BANDWIDTH_DEFAULT = 0
IP_RESOLVE_DEFAULT = IpResolve.WHATEVER
METADATA_EXPIRE_DEFAULT = 60 * 60 * 48
COST_DEFAULT = 1000
PRIORITY_DEFAULT = 99


@dataclass(frozen=True)
class OptionDescriptor:
    """Registry entry of a single repo option.

    Attributes:
        option: The option this entry describes
        key: Key name inside the repo group (the group name itself for ID)
        kind: Value kind selecting coercion on get and formatting on set
        default: Value reported when the key is absent, or NO_DEFAULT
        read_only: Whether set_option refuses the option
    """

    option: RepoOption
    key: str
    kind: OptionKind
    default: Any = None
    read_only: bool = False


def _entry(
    option: RepoOption, kind: OptionKind, default: Any = None, read_only: bool = False
) -> tuple[RepoOption, OptionDescriptor]:
    return option, OptionDescriptor(option, option.value, kind, default, read_only)


OPTIONS: MappingProxyType[RepoOption, OptionDescriptor] = MappingProxyType(
    dict(
        [
            _entry(RepoOption.ID, OptionKind.ID, read_only=True),
            _entry(RepoOption.NAME, OptionKind.STRING),
            _entry(RepoOption.ENABLED, OptionKind.BOOL, True),
            _entry(RepoOption.BASEURL, OptionKind.STRING_LIST),
            _entry(RepoOption.MIRRORLIST, OptionKind.STRING),
            _entry(RepoOption.METALINK, OptionKind.STRING),
            _entry(RepoOption.MEDIAID, OptionKind.STRING),
            _entry(RepoOption.GPGKEY, OptionKind.STRING_LIST),
            _entry(RepoOption.GPGCAKEY, OptionKind.STRING_LIST),
            _entry(RepoOption.EXCLUDE, OptionKind.STRING_LIST),
            _entry(RepoOption.INCLUDE, OptionKind.STRING_LIST),
            _entry(RepoOption.FASTESTMIRROR, OptionKind.BOOL, False),
            _entry(RepoOption.PROXY, OptionKind.STRING),
            _entry(RepoOption.PROXY_USERNAME, OptionKind.STRING),
            _entry(RepoOption.PROXY_PASSWORD, OptionKind.STRING),
            _entry(RepoOption.USERNAME, OptionKind.STRING),
            _entry(RepoOption.PASSWORD, OptionKind.STRING),
            _entry(RepoOption.GPGCHECK, OptionKind.BOOL, False),
            _entry(RepoOption.REPO_GPGCHECK, OptionKind.BOOL, False),
            _entry(RepoOption.ENABLEGROUPS, OptionKind.BOOL, True),
            _entry(RepoOption.BANDWIDTH, OptionKind.BANDWIDTH, BANDWIDTH_DEFAULT),
            _entry(RepoOption.THROTTLE, OptionKind.STRING),
            _entry(RepoOption.IP_RESOLVE, OptionKind.IP_RESOLVE, IP_RESOLVE_DEFAULT),
            _entry(
                RepoOption.METADATA_EXPIRE, OptionKind.INTERVAL, METADATA_EXPIRE_DEFAULT
            ),
            _entry(RepoOption.COST, OptionKind.INT, COST_DEFAULT),
            _entry(RepoOption.PRIORITY, OptionKind.INT, PRIORITY_DEFAULT),
            _entry(RepoOption.SSLCACERT, OptionKind.STRING),
            _entry(RepoOption.SSLVERIFY, OptionKind.BOOL, True),
            _entry(RepoOption.SSLCLIENTCERT, OptionKind.STRING),
            _entry(RepoOption.SSLCLIENTKEY, OptionKind.STRING),
            _entry(RepoOption.DELTAREPOBASEURL, OptionKind.STRING_LIST),
        ]
    )
)

LIST_SEPARATORS = re.compile(r"[ ,;]")
LIST_ITEM_FORBIDDEN = re.compile(r"[\s,;]")
INTEGER = re.compile(r"[+-]?\d+", re.ASCII)
TRUE_WORDS = frozenset({"1", "yes", "true"})

# Never written to logs
SECRET_KEYS = frozenset({"password", "proxy_password"})


def resolve_option(option: RepoOption | str) -> OptionDescriptor:
    """Look up the registry entry of an option given as member or key name.

    Raises:
        BadArgumentError: If the option is not a recognized repo option
    """
    if isinstance(option, str):
        try:
            option = RepoOption(option)
        except ValueError:
            raise BadArgumentError(f"Unknown repo option '{option}'") from None

    if not isinstance(option, RepoOption):
        raise BadArgumentError(f"Not a repo option: {option!r}")

    return OPTIONS[option]


def _check_repo(repo: Any) -> RepoConf:
    if not isinstance(repo, RepoConf):
        raise BadArgumentError(f"No repo config specified (got {repo!r})")
    return repo


# Getters: (repo, descriptor, stored text) -> typed value


def _get_string(repo: RepoConf, descriptor: OptionDescriptor, raw: str) -> str:
    return raw


def _get_string_list(
    repo: RepoConf, descriptor: OptionDescriptor, raw: str
) -> list[str]:
    items = (item.strip() for item in LIST_SEPARATORS.split(raw))
    return [item for item in items if item]


def _get_bool(repo: RepoConf, descriptor: OptionDescriptor, raw: str) -> bool:
    return raw.lower() in TRUE_WORDS


def _get_int(repo: RepoConf, descriptor: OptionDescriptor, raw: str) -> int:
    if not INTEGER.fullmatch(raw):
        raise MalformedValueError(
            f"Cannot get value of option {descriptor.key}: '{raw}' is not an integer",
            option=descriptor.key,
            value=raw,
        )
    value = repo.keyfile.getint(repo.id, descriptor.key)

    if not INT32_MIN <= value <= INT32_MAX:
        raise InvalidValueError(
            f"Value of option {descriptor.key} is out of range: '{raw}'",
            option=descriptor.key,
            value=raw,
        )
    return value


def _get_bandwidth(repo: RepoConf, descriptor: OptionDescriptor, raw: str) -> int:
    try:
        return convert_bandwidth_to_bytes(raw)
    except InvalidValueError as e:
        raise InvalidValueError(
            f"Invalid value of option {descriptor.key}: {e}",
            option=descriptor.key,
            value=raw,
        ) from e


def _get_interval(repo: RepoConf, descriptor: OptionDescriptor, raw: str) -> int:
    try:
        return convert_interval_to_seconds(raw)
    except InvalidValueError as e:
        raise InvalidValueError(
            f"Invalid value of option {descriptor.key}: {e}",
            option=descriptor.key,
            value=raw,
        ) from e


def _get_ip_resolve(
    repo: RepoConf, descriptor: OptionDescriptor, raw: str
) -> IpResolve:
    try:
        return IpResolve(raw.lower())
    except ValueError as e:
        raise InvalidValueError(
            f"Unknown {descriptor.key} value '{raw}'",
            option=descriptor.key,
            value=raw,
        ) from e


_GETTERS: dict[OptionKind, Callable[[RepoConf, OptionDescriptor, str], Any]] = {
    OptionKind.STRING: _get_string,
    OptionKind.STRING_LIST: _get_string_list,
    OptionKind.BOOL: _get_bool,
    OptionKind.INT: _get_int,
    OptionKind.BANDWIDTH: _get_bandwidth,
    OptionKind.INTERVAL: _get_interval,
    OptionKind.IP_RESOLVE: _get_ip_resolve,
}


def get_option(repo: RepoConf, option: RepoOption | str) -> Any:
    """Read the typed value of an option.

    An absent key yields the option's registered default.

    Args:
        repo: Repository to read from
        option: Option member or its key name (e.g. "baseurl")

    Returns:
        Value of the Python type registered for the option's kind

    Raises:
        BadArgumentError: If repo or option is not valid
        NotSetError: If the option has no default and is not set
        MalformedValueError: If an integer option holds non-numeric text
        InvalidValueError: If the stored text does not fit the option's kind
    """
    repo = _check_repo(repo)
    descriptor = resolve_option(option)

    if descriptor.kind is OptionKind.ID:
        return repo.id

    raw = repo.keyfile.get(repo.id, descriptor.key, fallback=None)
    if raw is None:
        if descriptor.default is NO_DEFAULT:
            raise NotSetError(descriptor.key)
        return descriptor.default

    return _GETTERS[descriptor.kind](repo, descriptor, raw)


def get_raw_option(repo: RepoConf, option: RepoOption | str) -> str:
    """Read the stored text of an option, without coercion or default.

    Raises:
        BadArgumentError: If repo or option is not valid
        NotSetError: If the key is absent
    """
    repo = _check_repo(repo)
    descriptor = resolve_option(option)

    if descriptor.kind is OptionKind.ID:
        return repo.id

    raw = repo.keyfile.get(repo.id, descriptor.key, fallback=None)
    if raw is None:
        raise NotSetError(descriptor.key)
    return raw


def get_all_options(repo: RepoConf) -> dict[str, Any]:
    """Typed values of every registered option, keyed by key name."""
    return {option.value: get_option(repo, option) for option in RepoOption}


# Formatters: (descriptor, value) -> text to store, or None to remove the key


def _type_error(descriptor: OptionDescriptor, expected: str, value: Any) -> BadArgumentError:
    return BadArgumentError(
        f"Option {descriptor.key} takes {expected}, got {type(value).__name__} {value!r}"
    )


def _format_string(descriptor: OptionDescriptor, value: Any) -> str | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise _type_error(descriptor, "a string", value)
    if "\n" in value or "\r" in value:
        raise BadArgumentError(f"Option {descriptor.key} may not contain line breaks")
    if "\t" in value:
        raise BadArgumentError(f"Option {descriptor.key} may not contain tabs")
    if value != value.strip():
        raise BadArgumentError(
            f"Option {descriptor.key} may not start or end with whitespace"
        )
    return value


def _format_string_list(descriptor: OptionDescriptor, value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise _type_error(descriptor, "a list of strings", value)
    if not value:
        return None

    for item in value:
        if not isinstance(item, str) or not item:
            raise _type_error(descriptor, "a list of non-empty strings", value)
        if LIST_ITEM_FORBIDDEN.search(item):
            raise BadArgumentError(
                f"Item '{item}' of option {descriptor.key} contains a list separator"
            )
    return ",".join(value)


def _format_bool(descriptor: OptionDescriptor, value: Any) -> str:
    if not isinstance(value, bool):
        raise _type_error(descriptor, "a bool", value)
    return "1" if value else "0"


def _format_ranged_int(
    descriptor: OptionDescriptor, value: Any, low: int, high: int
) -> str:
    if not isinstance(value, int) or isinstance(value, bool):
        raise _type_error(descriptor, "an int", value)
    if not low <= value <= high:
        raise BadArgumentError(
            f"Value {value} of option {descriptor.key} is outside [{low}, {high}]"
        )
    return str(value)


def _format_int(descriptor: OptionDescriptor, value: Any) -> str:
    return _format_ranged_int(descriptor, value, INT32_MIN, INT32_MAX)


def _format_bandwidth(descriptor: OptionDescriptor, value: Any) -> str:
    return _format_ranged_int(descriptor, value, 0, UINT64_MAX)


def _format_interval(descriptor: OptionDescriptor, value: Any) -> str:
    # Stored in plain seconds
    return _format_ranged_int(descriptor, value, INT64_MIN, INT64_MAX)


def _format_ip_resolve(descriptor: OptionDescriptor, value: Any) -> str:
    if isinstance(value, IpResolve):
        return value.value
    if isinstance(value, str):
        try:
            return IpResolve(value.lower()).value
        except ValueError:
            raise BadArgumentError(
                f"Unknown {descriptor.key} value '{value}'"
            ) from None
    raise _type_error(descriptor, "an IpResolve", value)


_FORMATTERS: dict[OptionKind, Callable[[OptionDescriptor, Any], str | None]] = {
    OptionKind.STRING: _format_string,
    OptionKind.STRING_LIST: _format_string_list,
    OptionKind.BOOL: _format_bool,
    OptionKind.INT: _format_int,
    OptionKind.BANDWIDTH: _format_bandwidth,
    OptionKind.INTERVAL: _format_interval,
    OptionKind.IP_RESOLVE: _format_ip_resolve,
}


def set_option(repo: RepoConf, option: RepoOption | str, value: Any) -> None:
    """Write an option of a repository.

    ``None``, an empty string or an empty list remove the key of a string
    or string list option, so it reads back as its default.

    Args:
        repo: Repository to modify
        option: Option member or its key name (e.g. "baseurl")
        value: New value of the Python type registered for the option's kind

    Raises:
        BadArgumentError: If repo or option is not valid, or value has the
            wrong type or is out of range for the option
        ReadOnlyError: If the option is read only
    """
    repo = _check_repo(repo)
    descriptor = resolve_option(option)

    if descriptor.read_only:
        raise ReadOnlyError(descriptor.key)

    text = _FORMATTERS[descriptor.kind](descriptor, value)
    keyfile = repo.keyfile

    if text is None:
        if keyfile.has_section(repo.id):
            keyfile.remove_option(repo.id, descriptor.key)
        logger.debug(f"Unset option {descriptor.key} of repo {repo.id}")
        return

    if not keyfile.has_section(repo.id):
        keyfile.add_section(repo.id)
    keyfile.set(repo.id, descriptor.key, text)

    shown = "***" if descriptor.key in SECRET_KEYS else text
    logger.debug(f"Set option {descriptor.key} of repo {repo.id} to '{shown}'")
