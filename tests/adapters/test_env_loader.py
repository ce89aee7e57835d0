from __future__ import annotations

import logging

import pytest

from lib_layered_reality.adapters.env.default import DefaultEnvLoader


def test_keys_are_lower_cased() -> None:
    loader = DefaultEnvLoader(environ={"HOME": "/home/frodo", "Path": "/usr/bin", "shell": "zsh"})
    assert loader.load() == {"home": "/home/frodo", "path": "/usr/bin", "shell": "zsh"}


def test_values_are_kept_as_strings() -> None:
    assert DefaultEnvLoader(environ={"RETRIES": "3", "ENABLED": "true"}).load() == {"retries": "3", "enabled": "true"}


def test_defaults_to_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LIB_LAYERED_REALITY_MARKER", "on")
    assert DefaultEnvLoader().load()["lib_layered_reality_marker"] == "on"


def test_only_key_names_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_layered_reality")
    DefaultEnvLoader(environ={"TOKEN": "s3cr3t"}).load()
    context = caplog.records[-1].context
    assert context["keys"] == ["token"]
    assert "s3cr3t" not in repr(context)
