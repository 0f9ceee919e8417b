"""Data models for the repository configuration store."""

import configparser
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from repoconf.keyfile import save_keyfile

if TYPE_CHECKING:
    from repoconf.options import RepoOption


class OptionKind(Enum):
    """Value kind of a repo option, selecting its coercion."""

    ID = "id"
    STRING = "string"
    STRING_LIST = "string_list"
    BOOL = "bool"
    INT = "int"
    BANDWIDTH = "bandwidth"
    INTERVAL = "interval"
    IP_RESOLVE = "ip_resolve"


class IpResolve(Enum):
    """Which IP protocol version to use when resolving mirror host names."""

    V4 = "ipv4"
    V6 = "ipv6"
    WHATEVER = "whatever"


@dataclass
class RepoFile:
    """A parsed repo file.

    Attributes:
        path: Location the file was loaded from and is saved to
        keyfile: Parsed key-value store holding every group of the file
    """

    path: str
    keyfile: configparser.ConfigParser = field(repr=False)

    def groups(self) -> list[str]:
        """Group (repo id) names in the order they appear in the file."""
        return self.keyfile.sections()

    def save(self) -> None:
        """Write the current contents back to ``path``."""
        save_keyfile(self.keyfile, self.path)


@dataclass
class RepoConf:
    """One repository definition inside a repo file.

    The repo has no state of its own: every value lives in ``file.keyfile``
    under the group named ``id``.

    Attributes:
        id: Short name of the repository (the group name)
        file: The repo file this repository was found in
    """

    id: str
    file: RepoFile = field(repr=False)

    @property
    def keyfile(self) -> configparser.ConfigParser:
        return self.file.keyfile

    def get(self, option: "RepoOption | str") -> Any:
        """Typed value of ``option``, or its default when not set."""
        from repoconf.options import get_option

        return get_option(self, option)

    def get_raw(self, option: "RepoOption | str") -> str:
        """Stored text of ``option`` without coercion or default."""
        from repoconf.options import get_raw_option

        return get_raw_option(self, option)

    def set(self, option: "RepoOption | str", value: Any) -> None:
        """Set ``option`` to ``value``; empty strings and lists unset it."""
        from repoconf.options import set_option

        set_option(self, option, value)

    def snapshot(self) -> dict[str, Any]:
        """Typed values of every registered option, keyed by option name."""
        from repoconf.options import get_all_options

        return get_all_options(self)
