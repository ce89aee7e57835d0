"""Environment variable adapter.

Purpose
-------
Snapshot process environment variables as a flat mapping with lower-cased keys
so they can join the config scope.

Key behaviours
--------------
* Every variable is captured; there is no prefix filter and no nesting.
* Keys are lower-cased to match the case-insensitive :class:`Scope` contract.
* Values stay strings exactly as the process received them.
* Emits structured logging via :mod:`lib_layered_reality.observability` with
  key names only, never values.
"""

from __future__ import annotations

import os
from typing import Mapping

from ...observability import log_debug


class DefaultEnvLoader:
    """Load environment variables as a flat, lower-cased mapping."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        """

        self._environ = os.environ if environ is None else environ

    def load(self) -> dict[str, str]:
        """Return every variable keyed by its lower-cased name.

        When two variables differ only by case the one listed last wins.

        Examples
        --------
        >>> DefaultEnvLoader(environ={"HOME": "/home/frodo", "Shell": "zsh"}).load()
        {'home': '/home/frodo', 'shell': 'zsh'}
        """

        collected = {key.lower(): value for key, value in self._environ.items()}
        log_debug("env_variables_loaded", source="env", path=None, keys=sorted(collected))
        return collected
