"""Property-based tests for option set/get round trips."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from repoconf.errors import BadArgumentError, ReadOnlyError
from repoconf.keyfile import dump_keyfile, parse_keyfile
from repoconf.models import IpResolve, OptionKind, RepoConf, RepoFile
from repoconf.options import OPTIONS, RepoOption, get_option, set_option
from repoconf.utils import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN, UINT64_MAX


def new_repo() -> RepoConf:
    text = "[main-repo]\nname = Main\nbaseurl = http://example.com/\ncost = 5\n"
    repofile = RepoFile(path="main.repo", keyfile=parse_keyfile(text, "main.repo"))
    return RepoConf(id="main-repo", file=repofile)


def options_of(kind: OptionKind) -> list[RepoOption]:
    return [o for o, d in OPTIONS.items() if d.kind is kind and not d.read_only]


# Stored text is stripped and tabs are folded to spaces on reload
plain_text = st.text(
    alphabet=st.characters(exclude_characters="\n\r\t", exclude_categories=("Cs",)),
    min_size=1,
    max_size=50,
).filter(lambda text: text == text.strip())

list_item = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789:/._-*?$",
    min_size=1,
    max_size=30,
)

VALUES = {
    OptionKind.STRING: plain_text,
    OptionKind.STRING_LIST: st.lists(list_item, min_size=1, max_size=6),
    OptionKind.BOOL: st.booleans(),
    OptionKind.INT: st.integers(min_value=INT32_MIN, max_value=INT32_MAX),
    OptionKind.BANDWIDTH: st.integers(min_value=0, max_value=UINT64_MAX),
    OptionKind.INTERVAL: st.integers(min_value=INT64_MIN, max_value=INT64_MAX),
    OptionKind.IP_RESOLVE: st.sampled_from(list(IpResolve)),
}


@st.composite
def option_and_value(draw):
    kind = draw(st.sampled_from(list(VALUES)))
    option = draw(st.sampled_from(options_of(kind)))
    return option, draw(VALUES[kind])


@given(pair=option_and_value())
def test_set_then_get_returns_value(pair):
    """For any writable option X and value v of its kind, set(X, v) then get(X) is v."""
    option, value = pair
    repo = new_repo()
    set_option(repo, option, value)
    assert get_option(repo, option) == value


@given(
    option=st.sampled_from(
        options_of(OptionKind.STRING) + options_of(OptionKind.STRING_LIST)
    ),
    empty=st.sampled_from([None, "", [], ()]),
)
def test_set_empty_then_get_returns_default(option, empty):
    """Clearing a string or list option makes it read back as its default."""
    repo = new_repo()
    if OPTIONS[option].kind is OptionKind.STRING and empty in ([], ()):
        empty = None
    if OPTIONS[option].kind is OptionKind.STRING_LIST and empty == "":
        empty = None
    set_option(repo, option, empty)
    assert get_option(repo, option) == OPTIONS[option].default
    assert not repo.keyfile.has_option(repo.id, OPTIONS[option].key)


@given(value=st.one_of(st.text(max_size=20), st.integers(), st.none()))
def test_id_is_always_read_only(value):
    repo = new_repo()
    with pytest.raises(ReadOnlyError):
        set_option(repo, RepoOption.ID, value)
    assert get_option(repo, RepoOption.ID) == "main-repo"


@given(pairs=st.lists(option_and_value(), min_size=1, max_size=10))
def test_last_write_wins(pairs):
    """After a sequence of writes each option reads back its last written value."""
    repo = new_repo()
    expected = {}
    for option, value in pairs:
        set_option(repo, option, value)
        expected[option] = value

    for option, value in expected.items():
        assert get_option(repo, option) == value


@given(pairs=st.lists(option_and_value(), min_size=1, max_size=10))
def test_values_survive_save_and_reload(pairs):
    """Whatever set() accepts reads back the same from the saved file text."""
    repo = new_repo()
    for option, value in pairs:
        set_option(repo, option, value)

    text = dump_keyfile(repo.keyfile)
    reloaded = RepoConf(
        id=repo.id, file=RepoFile(path="main.repo", keyfile=parse_keyfile(text))
    )
    for option in RepoOption:
        assert get_option(reloaded, option) == get_option(repo, option)


@given(
    text=st.text(alphabet=" \t\n\r", min_size=1, max_size=3),
    inner=plain_text,
)
def test_strings_that_would_change_on_reload_are_rejected(text, inner):
    repo = new_repo()
    for value in (text, f"{text}{inner}", f"{inner}{text}"):
        with pytest.raises(BadArgumentError):
            set_option(repo, RepoOption.PROXY, value)
    assert get_option(repo, RepoOption.PROXY) is None
