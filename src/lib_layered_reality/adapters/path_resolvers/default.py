"""Filesystem search-path resolution for a namespace.

Purpose
-------
Implement the :class:`lib_layered_reality.application.ports.PathResolver`
protocol by encapsulating the XDG base-directory rules. The adapter is the only
component that understands where configuration directories live.

Contents
--------
* :class:`XdgPathResolver` – computes the ordered, immutable search path list.
* :func:`_expand_home` – tilde expansion against a captured ``HOME``.

System Role
-----------
Feeds a deterministic directory list into
:class:`lib_layered_reality.adapters.file_locator.default.FileLocator`. The
environment is captured once at construction so the list never drifts while a
:class:`~lib_layered_reality.core.Reality` is being built.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from ...domain.errors import ConfigurationError, InvalidNamespaceError
from ...observability import log_debug

#: Default user configuration base, used when ``XDG_CONFIG_HOME`` is unset.
CONFIG_HOME_DEFAULT = "~/.config"
#: Default system configuration bases, used when ``XDG_CONFIG_DIRS`` is unset.
CONFIG_DIRS_DEFAULT = "/etc/xdg"


class XdgPathResolver:
    """Resolve the ordered candidate directories for *namespace*.

    Why
    ----
    Centralise path discovery so file location, the CLI tasks, and error
    messages all agree on the same ordered list.
    """

    def __init__(self, namespace: str | None, *, env: Mapping[str, str] | None = None) -> None:
        """Validate *namespace* and compute the search paths.

        Parameters
        ----------
        namespace:
            Subdirectory name appended to every base directory.
        env:
            Environment mapping used instead of :data:`os.environ`. It replaces
            the process environment entirely so tests can model an unset
            ``HOME``.

        Raises
        ------
        InvalidNamespaceError
            When *namespace* is ``None`` or empty. Checked before the
            environment is read.

        Examples
        --------
        >>> resolver = XdgPathResolver("test-app", env={"XDG_CONFIG_DIRS": "/a:/b"})
        >>> [str(path) for path in resolver.search_paths]
        ['/a/test-app', '/b/test-app']
        """

        if namespace is None:
            raise InvalidNamespaceError("namespace cannot be nil")
        if not namespace:
            raise InvalidNamespaceError("namespace cannot be an empty string")

        self.namespace = namespace
        self.env = dict(os.environ if env is None else env)
        self._search_paths = tuple(self._resolve())
        log_debug(
            "search_paths_resolved",
            source="paths",
            path=None,
            namespace=namespace,
            search_paths=[str(path) for path in self._search_paths],
        )

    @property
    def search_paths(self) -> tuple[Path, ...]:
        """Return the absolute search directories, primary location first."""

        return self._search_paths

    @property
    def primary(self) -> Path:
        """Return the directory new files are created in.

        Raises
        ------
        ConfigurationError
            When ``HOME`` is unset and ``XDG_CONFIG_DIRS`` lists no directory.
        """

        if not self._search_paths:
            raise ConfigurationError(
                "No config directory to use. Set HOME, or set XDG_CONFIG_DIRS to at least one directory."
            )
        return self._search_paths[0]

    def _resolve(self) -> list[Path]:
        """Build ``[home base (if HOME is set)] + system bases`` suffixed with the namespace."""

        home_base = self.env.get("XDG_CONFIG_HOME", CONFIG_HOME_DEFAULT)
        system_bases = [entry for entry in self.env.get("XDG_CONFIG_DIRS", CONFIG_DIRS_DEFAULT).split(":") if entry]

        bases = list(system_bases)
        if "HOME" in self.env:
            bases.insert(0, home_base)
        return [Path(os.path.abspath(_expand_home(base, self.env.get("HOME")))) / self.namespace for base in bases]


def _expand_home(raw: str, home: str | None) -> str:
    """Expand a leading ``~`` against *home*, falling back to the user database.

    Examples
    --------
    >>> _expand_home("~/.config", "/home/frodo")
    '/home/frodo/.config'
    >>> _expand_home("/etc/xdg", None)
    '/etc/xdg'
    """

    if raw != "~" and not raw.startswith("~/"):
        return raw
    if home:
        return home + raw[1:]
    return os.path.expanduser(raw)
