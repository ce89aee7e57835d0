"""Unique file discovery across the namespace search paths.

Purpose
-------
Find exactly one file with a given basename. Silently picking the first match
would let a stale copy in a lower-priority directory cause confusing drift, so
zero matches and multiple matches are separate, explicit failures.

Contents
--------
* :class:`FileLocator` – ``find`` returns a :class:`PrivateFile` or raises
  :class:`NotFound` / :class:`AmbiguousSourceError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from ...domain.errors import AmbiguousSourceError, NotFound
from ...observability import log_debug, log_error
from ..path_resolvers.default import XdgPathResolver
from .private import PrivateFile


class FileLocator:
    """Locate files inside the XDG directories of a namespace."""

    def __init__(self, namespace: str | None, *, env: Mapping[str, str] | None = None) -> None:
        """Build the underlying :class:`XdgPathResolver`.

        Raises
        ------
        InvalidNamespaceError
            Propagated from the resolver for ``None`` or empty namespaces.
        """

        self._resolver = XdgPathResolver(namespace, env=env)

    @classmethod
    def from_resolver(cls, resolver: XdgPathResolver) -> FileLocator:
        """Reuse an existing resolver instead of re-reading the environment."""

        locator = cls.__new__(cls)
        locator._resolver = resolver
        return locator

    @property
    def namespace(self) -> str:
        return self._resolver.namespace

    @property
    def search_paths(self) -> tuple[Path, ...]:
        return self._resolver.search_paths

    @property
    def primary(self) -> Path:
        """Return the first search directory, where new files are created."""

        return self._resolver.primary

    def describe_search_paths(self) -> str:
        """Return the search paths joined with ``", "`` for error messages."""

        return ", ".join(str(path) for path in self.search_paths)

    def find(self, basename: str, ext: str | None = None) -> PrivateFile:
        """Return the single file called *basename* within the search paths.

        ``find("config", "yml")`` is equivalent to ``find("config.yml")``.

        Raises
        ------
        NotFound
            When no search directory contains the file.
        AmbiguousSourceError
            When more than one does; all matches are listed in search order.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> locator = FileLocator("demo", env={"XDG_CONFIG_DIRS": tmp.name})
        >>> locator.find("config", "yml")
        Traceback (most recent call last):
        ...
        lib_layered_reality.domain.errors.NotFound: Could not find config.yml
        >>> tmp.cleanup()
        """

        if ext:
            basename = f"{basename}.{ext}"

        matches = [directory / basename for directory in self.search_paths if (directory / basename).exists()]

        if len(matches) > 1:
            listed = ", ".join(str(path) for path in matches)
            log_error("file_ambiguous", source=basename, path=None, matches=[str(path) for path in matches])
            raise AmbiguousSourceError(
                f"Found more than 1 {basename} file: {listed}. {AmbiguousSourceError.HINT}"
            )
        if not matches:
            log_debug("file_missing", source=basename, path=None)
            raise NotFound(f"Could not find {basename}")

        log_debug("file_located", source=basename, path=str(matches[0]))
        return PrivateFile(matches[0])
