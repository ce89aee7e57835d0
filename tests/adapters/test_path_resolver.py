"""Search path resolution tests following the XDG base-directory rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_layered_reality.adapters.path_resolvers.default import XdgPathResolver
from lib_layered_reality.domain.errors import ConfigurationError, InvalidNamespaceError

SEGMENT = st.text(alphabet="abcdefghij", min_size=1, max_size=6)


def test_system_dirs_only_without_home() -> None:
    resolver = XdgPathResolver("test-app", env={"XDG_CONFIG_DIRS": "/a:/b"})
    assert resolver.search_paths == (Path("/a/test-app"), Path("/b/test-app"))


def test_home_directory_comes_first() -> None:
    resolver = XdgPathResolver("moria", env={"HOME": "/home/frodo", "XDG_CONFIG_DIRS": "/etc/a:/etc/b"})
    assert [str(path) for path in resolver.search_paths] == [
        "/home/frodo/.config/moria",
        "/etc/a/moria",
        "/etc/b/moria",
    ]
    assert resolver.primary == Path("/home/frodo/.config/moria")


def test_defaults_when_variables_are_unset() -> None:
    resolver = XdgPathResolver("moria", env={"HOME": "/home/frodo"})
    assert [str(path) for path in resolver.search_paths] == ["/home/frodo/.config/moria", "/etc/xdg/moria"]


def test_config_home_override_is_used() -> None:
    resolver = XdgPathResolver("moria", env={"HOME": "/home/frodo", "XDG_CONFIG_HOME": "/srv/config"})
    assert resolver.search_paths[0] == Path("/srv/config/moria")


def test_config_home_ignored_without_home() -> None:
    resolver = XdgPathResolver("moria", env={"XDG_CONFIG_HOME": "/srv/config", "XDG_CONFIG_DIRS": "/etc/a"})
    assert resolver.search_paths == (Path("/etc/a/moria"),)


def test_tilde_expands_against_captured_home() -> None:
    resolver = XdgPathResolver("moria", env={"HOME": "/home/sam", "XDG_CONFIG_HOME": "~/cfg", "XDG_CONFIG_DIRS": "/x"})
    assert resolver.search_paths[0] == Path("/home/sam/cfg/moria")


def test_empty_segments_are_skipped() -> None:
    resolver = XdgPathResolver("moria", env={"XDG_CONFIG_DIRS": "/a::/b:"})
    assert resolver.search_paths == (Path("/a/moria"), Path("/b/moria"))


def test_primary_without_any_directory_names_the_variables() -> None:
    resolver = XdgPathResolver("moria", env={"XDG_CONFIG_DIRS": ":"})
    assert resolver.search_paths == ()
    with pytest.raises(ConfigurationError, match="XDG_CONFIG_DIRS"):
        resolver.primary



def test_paths_are_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    resolver = XdgPathResolver("moria", env={"XDG_CONFIG_DIRS": "relative"})
    assert resolver.search_paths == (tmp_path / "relative" / "moria",)


def test_environment_is_captured_once() -> None:
    env = {"XDG_CONFIG_DIRS": "/a"}
    resolver = XdgPathResolver("moria", env=env)
    env["XDG_CONFIG_DIRS"] = "/b"
    assert resolver.search_paths == (Path("/a/moria"),)


@pytest.mark.parametrize(
    ("namespace", "message"),
    [(None, "namespace cannot be nil"), ("", "namespace cannot be an empty string")],
)
def test_invalid_namespace(namespace, message) -> None:
    with pytest.raises(InvalidNamespaceError, match=message):
        XdgPathResolver(namespace, env={})


def test_invalid_namespace_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        XdgPathResolver("", env={})


@given(st.lists(SEGMENT, min_size=1, max_size=5), st.booleans())
def test_order_is_deterministic(segments, with_home) -> None:
    env = {"XDG_CONFIG_DIRS": ":".join(f"/{segment}" for segment in segments)}
    if with_home:
        env["HOME"] = "/home/frodo"
    first = XdgPathResolver("ns", env=env).search_paths
    second = XdgPathResolver("ns", env=dict(env)).search_paths

    assert first == second
    system = first[1:] if with_home else first
    assert [str(path) for path in system] == [f"/{segment}/ns" for segment in segments]
    if with_home:
        assert first[0] == Path("/home/frodo/.config/ns")
