"""Permission-checked file access.

Purpose
-------
Wrap a located path so every read first verifies that the file is private to
its owner (and optionally its group). Configuration and secrets files commonly
leak through group- or world-readable bits inherited from the umask; this
adapter turns that into a hard failure.

Contents
--------
* :data:`ALLOWED_MODES` – the six accepted permission modes.
* :data:`DEFAULT_PERMISSIONS` – mode applied to newly created files.
* :class:`PrivateFile` – path wrapper with guarded ``read_text``/``read_bytes``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

from ...domain.errors import FilePermissionsError
from ...observability import log_error

_PERMISSIONS_MASK: Final[int] = 0o777

#: Owner read-only or read-write, combined with group read-only, read-write, or
#: nothing. "Other" bits are never allowed.
ALLOWED_MODES: Final[frozenset[int]] = frozenset(
    owner | group for owner in (0o600, 0o400) for group in (0o060, 0o040, 0o000)
)

#: Mode for files created by the CLI tasks.
DEFAULT_PERMISSIONS: Final[int] = 0o600


class PrivateFile:
    """A located file whose permissions are verified on every read.

    Why
    ----
    Permissions may change between calls, so the check is never cached.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "config.yml"
    >>> _ = target.write_text("location: Moria", encoding="utf-8")
    >>> target.chmod(0o600)
    >>> PrivateFile(target).read_text()
    'location: Moria'
    >>> target.chmod(0o644)
    >>> PrivateFile(target).read_text()  # doctest: +ELLIPSIS
    Traceback (most recent call last):
    ...
    lib_layered_reality.domain.errors.FilePermissionsError: File '...' has improper permissions (0644). Try: chmod 600 ...
    >>> tmp.cleanup()
    """

    __slots__ = ("_path",)

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Return the wrapped path."""

        return self._path

    @property
    def name(self) -> str:
        return self._path.name

    def stat(self) -> os.stat_result:
        return self._path.stat()

    def chmod(self, mode: int) -> None:
        self._path.chmod(mode)

    def mode(self) -> int:
        """Return the lowest nine permission bits of the file."""

        return self.stat().st_mode & _PERMISSIONS_MASK

    def permissions_ok(self) -> bool:
        """Return ``True`` when the current mode is one of :data:`ALLOWED_MODES`."""

        return self.mode() in ALLOWED_MODES

    def read_text(self, encoding: str = "utf-8") -> str:
        """Verify permissions, then return the file contents as text."""

        self.verify_permissions()
        return self._path.read_text(encoding=encoding)

    def read_bytes(self) -> bytes:
        """Verify permissions, then return the raw file contents."""

        self.verify_permissions()
        return self._path.read_bytes()

    def verify_permissions(self) -> None:
        """Raise :class:`FilePermissionsError` unless the mode is allowed.

        The message names the path, the offending mode as four octal digits,
        and a ``chmod`` remediation hint.
        """

        mode = self.mode()
        if mode in ALLOWED_MODES:
            return
        log_error("permissions_rejected", source="file", path=str(self._path), mode=f"{mode:04o}")
        raise FilePermissionsError(
            f"File '{self._path}' has improper permissions ({mode:04o}). Try: chmod 600 {self._path}",
            path=str(self._path),
            mode=mode,
        )

    def __fspath__(self) -> str:
        return str(self._path)

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"PrivateFile({str(self._path)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PrivateFile):
            return self._path == other._path
        if isinstance(other, Path):
            return self._path == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)
