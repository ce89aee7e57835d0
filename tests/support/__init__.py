"""Shared sandbox helpers for laying out XDG directories in tests.

``create_reality_sandbox`` returns a :class:`RealitySandbox` rooted in
``tmp_path`` with one home directory and two system directories. Tests write
config, secrets and key files into any of them with an explicit mode and hand
``sandbox.env`` (or ``sandbox.context()``) to the code under test, so nothing
touches the real home directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lib_layered_reality.adapters.secrets.codec import AesGcmCodec
from lib_layered_reality.adapters.secrets.key_resolver import MASTER_KEY_ENV
from lib_layered_reality.core import RealityContext

NAMESPACE = "moria"


@dataclass
class RealitySandbox:
    root: Path
    namespace: str
    home: Path
    system_bases: tuple[Path, ...]
    env: dict[str, str] = field(default_factory=dict)

    @property
    def user_dir(self) -> Path:
        """Primary search directory: ``$XDG_CONFIG_HOME/<namespace>``."""

        return self.home / ".config" / self.namespace

    def system_dir(self, index: int = 0) -> Path:
        return self.system_bases[index] / self.namespace

    def directory(self, where: str | int = "user") -> Path:
        if where == "user":
            return self.user_dir
        return self.system_dir(int(where))

    def write(self, name: str, content: str | bytes, *, where: str | int = "user", mode: int = 0o600) -> Path:
        """Write *content* to *name* inside the chosen directory and chmod it to *mode*."""

        target = self.directory(where) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
        os.chmod(target, mode)
        return target

    def write_secrets(
        self,
        content: str,
        *,
        key: str | None = None,
        where: str | int = "user",
        mode: int = 0o600,
    ) -> tuple[Path, str]:
        """Encrypt *content* and write it as ``secrets.yml``; return the path and key."""

        codec = AesGcmCodec()
        key = key or codec.generate_key()
        return self.write("secrets.yml", codec.encrypt(key, content), where=where, mode=mode), key

    def context(self, **overrides: Any) -> RealityContext:
        """Return a :class:`RealityContext` bound to :attr:`env`."""

        overrides.setdefault("environ", self.env)
        return RealityContext(**overrides)

    def apply_env(self, monkeypatch: Any) -> None:
        """Mirror :attr:`env` into ``os.environ`` for code that reads the process environment."""

        monkeypatch.delenv(MASTER_KEY_ENV, raising=False)
        for key, value in self.env.items():
            monkeypatch.setenv(key, value)


def create_reality_sandbox(tmp_path: Path, namespace: str = NAMESPACE) -> RealitySandbox:
    """Create a sandbox with a home directory and two system config bases."""

    home = tmp_path / "home"
    system_bases = (tmp_path / "etc-a", tmp_path / "etc-b")
    home.mkdir(parents=True, exist_ok=True)
    env = {
        "HOME": str(home),
        "XDG_CONFIG_HOME": str(home / ".config"),
        "XDG_CONFIG_DIRS": ":".join(str(base) for base in system_bases),
    }
    return RealitySandbox(root=tmp_path, namespace=namespace, home=home, system_bases=system_bases, env=env)


__all__ = ["NAMESPACE", "RealitySandbox", "create_reality_sandbox"]
