"""Permission guard tests."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_layered_reality.adapters.file_locator.private import ALLOWED_MODES, DEFAULT_PERMISSIONS, PrivateFile
from lib_layered_reality.domain.errors import FilePermissionsError

EXPECTED_MODES = {0o600, 0o660, 0o640, 0o400, 0o460, 0o440}


@pytest.fixture()
def target(tmp_path: Path) -> Path:
    path = tmp_path / "config.yml"
    path.write_text("location: Moria\n", encoding="utf-8")
    path.chmod(0o600)
    return path


def test_allowed_modes_are_owner_and_group_only() -> None:
    assert ALLOWED_MODES == EXPECTED_MODES
    assert DEFAULT_PERMISSIONS == 0o600


def test_every_mode_outside_the_product_is_rejected() -> None:
    for mode in range(0o1000):
        owner, group, other = mode & 0o700, mode & 0o070, mode & 0o007
        expected = owner in (0o600, 0o400) and group in (0o060, 0o040, 0o000) and other == 0
        assert (mode in ALLOWED_MODES) is expected, oct(mode)


@given(st.integers(min_value=0, max_value=0o777))
def test_guard_matches_allow_list(tmp_path_factory, mode) -> None:
    path = tmp_path_factory.mktemp("modes") / "secrets.yml"
    path.write_bytes(b"")
    path.chmod(mode)
    try:
        assert PrivateFile(path).permissions_ok() is (mode in ALLOWED_MODES)
    finally:
        path.chmod(0o600)


@pytest.mark.parametrize("mode", sorted(ALLOWED_MODES))
def test_reads_succeed_for_allowed_modes(target: Path, mode: int) -> None:
    target.chmod(mode)
    if not os.access(target, os.R_OK):
        pytest.skip("file is not readable by the current user with this mode")
    assert PrivateFile(target).read_text() == "location: Moria\n"
    assert PrivateFile(target).read_bytes() == b"location: Moria\n"


@pytest.mark.parametrize("mode", [0o644, 0o604, 0o700, 0o666, 0o000, 0o200])
def test_reads_fail_for_other_modes(target: Path, mode: int, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR, logger="lib_layered_reality")
    target.chmod(mode)
    with pytest.raises(FilePermissionsError) as excinfo:
        PrivateFile(target).read_text()
    error = excinfo.value
    assert str(error) == f"File '{target}' has improper permissions ({mode:04o}). Try: chmod 600 {target}"
    assert error.mode == mode
    assert str(error.path) == str(target)
    assert any(record.getMessage() == "permissions_rejected" for record in caplog.records)


def test_check_runs_on_every_read(target: Path) -> None:
    private = PrivateFile(target)
    assert private.read_text()
    target.chmod(0o644)
    with pytest.raises(FilePermissionsError):
        private.read_bytes()


def test_permissions_ok_does_not_raise(target: Path) -> None:
    private = PrivateFile(target)
    assert private.permissions_ok()
    private.chmod(0o644)
    assert not private.permissions_ok()
    assert private.mode() == 0o644


def test_path_protocols(target: Path) -> None:
    private = PrivateFile(target)
    assert os.fspath(private) == str(target)
    assert str(private) == str(target)
    assert private == PrivateFile(str(target))
    assert private == target
    assert private.name == "config.yml"
    assert private.stat().st_size == len("location: Moria\n")
    assert len({private, PrivateFile(target)}) == 1
