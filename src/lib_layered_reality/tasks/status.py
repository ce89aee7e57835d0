"""Read-only reports about a namespace.

Purpose
    Answer "where would the files be looked up?" and "what is there now?"
    without loading or decrypting anything.

Contents
    - ``FileStatus``: one report line for one file.
    - ``StatusTask``: ``show_paths`` and ``status``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final, Mapping

from ..adapters.file_locator.default import FileLocator
from ..adapters.secrets.key_resolver import DEFAULT_KEY_FILE_NAME
from ..core import CONFIG_FILE_NAME, SECRETS_FILE_NAME
from ..domain.errors import AmbiguousSourceError, NotFound

#: Files reported by :meth:`StatusTask.status`, in display order.
STATUS_FILES: Final[tuple[str, ...]] = (CONFIG_FILE_NAME, SECRETS_FILE_NAME, DEFAULT_KEY_FILE_NAME)


@dataclass(frozen=True, slots=True)
class FileStatus:
    """Lookup outcome for one file.

    ``state`` is ``"ok"``, ``"missing"``, ``"ambiguous"`` or
    ``"improper permissions (0644)"``.

    Examples
    --------
    >>> FileStatus("config.yml", None, "missing").render()
    'config.yml: missing'
    """

    name: str
    path: Path | None
    state: str

    def render(self) -> str:
        if self.path is None:
            return f"{self.name}: {self.state}"
        return f"{self.name}: {self.state} ({self.path})"


class StatusTask:
    """Report search paths and file states for a namespace."""

    def __init__(self, namespace: str, *, env: Mapping[str, str] | None = None) -> None:
        self._locator = FileLocator(namespace, env=env)

    def show_paths(self) -> tuple[Path, ...]:
        """Return the search directories, primary location first."""

        return self._locator.search_paths

    def status(self) -> list[FileStatus]:
        """Return one :class:`FileStatus` per entry of :data:`STATUS_FILES`.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> [line.render() for line in StatusTask("demo", env={"XDG_CONFIG_DIRS": tmp.name}).status()]
        ['config.yml: missing', 'secrets.yml: missing', 'master_key: missing']
        >>> tmp.cleanup()
        """

        return [self._inspect(name) for name in STATUS_FILES]

    def _inspect(self, name: str) -> FileStatus:
        try:
            located = self._locator.find(name)
        except NotFound:
            return FileStatus(name, None, "missing")
        except AmbiguousSourceError:
            return FileStatus(name, None, "ambiguous")
        if located.permissions_ok():
            return FileStatus(name, located.path, "ok")
        return FileStatus(name, located.path, f"improper permissions ({located.mode():04o})")
