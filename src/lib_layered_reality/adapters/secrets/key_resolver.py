"""Decryption key resolution.

Purpose
-------
Decide which key unlocks the secrets file using an ordered fallback chain. The
first source that yields a value wins; there is no fallthrough once a value has
been produced, even if the codec later rejects it.

Order
-----
1. An explicit in-process override (``RealityContext.master_key``).
2. The ``LIB_LAYERED_REALITY_MASTER_KEY`` environment variable.
3. A key file (``master_key`` by default) found in the namespace search paths
   and read through :class:`PrivateFile`, whitespace-trimmed.
4. When the key file is missing and stdin is a terminal, a hidden prompt on
   stderr.
5. Otherwise :class:`SecretsFileDecryptionError` naming the key file and the
   search paths.

Only the name of the winning source is logged, never the key.
"""

from __future__ import annotations

import getpass
import os
import sys
from typing import Callable, Final, Mapping, TextIO

from ...domain.errors import NotFound, SecretsFileDecryptionError
from ...observability import log_debug
from ..file_locator.default import FileLocator

#: Environment variable consulted after the explicit override.
MASTER_KEY_ENV: Final[str] = "LIB_LAYERED_REALITY_MASTER_KEY"

#: Key file basename searched for when the caller does not name one.
DEFAULT_KEY_FILE_NAME: Final[str] = "master_key"


def prompt_hidden(message: str) -> str:
    """Ask for a key on stderr without echoing the typed characters."""

    return getpass.getpass(f"{message}\n", stream=sys.stderr)


class KeyResolver:
    """Resolve the secrets decryption key from the configured sources."""

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        stdin: TextIO | None = None,
        prompt: Callable[[str], str] | None = None,
    ) -> None:
        """Store the collaborators used by the fallback chain.

        Parameters
        ----------
        environ:
            Mapping consulted for :data:`MASTER_KEY_ENV`. Defaults to
            :data:`os.environ`.
        stdin:
            Stream whose ``isatty`` decides whether prompting is allowed.
            Defaults to :data:`sys.stdin` at resolution time.
        prompt:
            Callable receiving the prompt text and returning the typed key.
            Defaults to :func:`prompt_hidden`.
        """

        self._environ = os.environ if environ is None else environ
        self._stdin = stdin
        self._prompt = prompt or prompt_hidden

    def resolve(
        self,
        explicit_override: str | None,
        key_filename: str | None,
        locator: FileLocator,
        *,
        purpose: str,
    ) -> str:
        """Return the first key produced by the fallback chain.

        Parameters
        ----------
        explicit_override:
            Key supplied in-process; used as-is when not ``None``.
        key_filename:
            Basename of the key file; defaults to :data:`DEFAULT_KEY_FILE_NAME`.
        locator:
            Locator sharing the search paths of the config and secrets files.
        purpose:
            Description of what is being decrypted, shown in the prompt.

        Raises
        ------
        SecretsFileDecryptionError
            When no key file exists and prompting is impossible.
        AmbiguousSourceError / FilePermissionsError
            Propagated from the key file lookup and read.
        """

        if explicit_override is not None:
            log_debug("key_resolved", source="override", path=None)
            return explicit_override

        from_env = self._environ.get(MASTER_KEY_ENV)
        if from_env is not None:
            log_debug("key_resolved", source="environment", path=None)
            return from_env.strip()

        filename = key_filename or DEFAULT_KEY_FILE_NAME
        try:
            key_file = locator.find(filename)
        except NotFound:
            if not self._interactive():
                raise SecretsFileDecryptionError(
                    f"Could not find file '{filename}'. Searched in: {locator.describe_search_paths()}"
                ) from None
            log_debug("key_resolved", source="prompt", path=None)
            return self._prompt(f"Enter master key to decrypt {purpose}:").strip()

        key = key_file.read_text().strip()
        log_debug("key_resolved", source="keyfile", path=str(key_file))
        return key

    def _interactive(self) -> bool:
        """Return ``True`` when the input stream is attached to a terminal."""

        stream = self._stdin if self._stdin is not None else sys.stdin
        isatty = getattr(stream, "isatty", None)
        return bool(isatty is not None and isatty())
