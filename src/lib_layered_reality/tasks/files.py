"""Create and edit the config and secrets files of a namespace.

Purpose
    Back the ``configs`` and ``secrets`` CLI commands with plain classes that
    return results and raise exceptions, leaving all terminal output to
    :mod:`lib_layered_reality.cli`.

Contents
    - ``CONFIG_TEMPLATE`` / ``SECRETS_TEMPLATE``: initial YAML document.
    - ``ConfigFileTask``: ``create`` and ``edit`` for ``config.yml``.
    - ``SecretsFileTask``: ``create``, ``edit`` and ``rotate`` for the
      encrypted ``secrets.yml``.
    - ``write_private``: exclusive creation of a ``0600`` file.

System Integration
    New files always land in the primary search directory, the first entry of
    :attr:`FileLocator.search_paths`, so the next
    :class:`~lib_layered_reality.core.Reality` load finds them. Editing works
    on whichever directory currently holds the file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Final, Mapping

import rich_click as click

from ..adapters.file_locator.default import FileLocator
from ..adapters.file_locator.private import DEFAULT_PERMISSIONS, PrivateFile
from ..adapters.secrets.codec import AesGcmCodec
from ..adapters.secrets.key_resolver import KeyResolver
from ..application.ports import SecretCodec
from ..core import CONFIG_FILE_NAME, SECRETS_FILE_NAME
from ..domain.errors import (
    DecryptionFailedError,
    InvalidKeyError,
    SecretsFileDecryptionError,
    SecretsFileEncryptionError,
)
from ..observability import log_info

CONFIG_TEMPLATE: Final[str] = "---\n"
SECRETS_TEMPLATE: Final[str] = "---\n"

#: Suffix appended to ``secrets.yml`` while a rotation is in progress.
SWAP_SUFFIX: Final[str] = ".tmp"


def write_private(path: Path, payload: bytes) -> None:
    """Create *path* with mode ``0600`` and write *payload* into it.

    Parent directories are created as needed. The file is created exclusively,
    so an existing file raises :class:`FileExistsError` and is left untouched.

    Examples
    --------
    >>> import stat
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "demo" / "config.yml"
    >>> write_private(target, b"---\\n")
    >>> oct(stat.S_IMODE(target.stat().st_mode))
    '0o600'
    >>> write_private(target, b"---\\n")  # doctest: +ELLIPSIS
    Traceback (most recent call last):
    ...
    FileExistsError: ...
    >>> tmp.cleanup()
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(mode=DEFAULT_PERMISSIONS, exist_ok=False)
    # touch() honours the umask; chmod pins the final mode.
    path.chmod(DEFAULT_PERMISSIONS)
    path.write_bytes(payload)


class _NamespacedFileTask:
    """Shared wiring for tasks that act on one file of a namespace."""

    filename: str = ""

    def __init__(
        self,
        namespace: str,
        *,
        env: Mapping[str, str] | None = None,
        editor: Callable[..., str | None] | None = None,
    ) -> None:
        self._locator = FileLocator(namespace, env=env)
        self._editor = editor or click.edit

    @property
    def locator(self) -> FileLocator:
        return self._locator

    @property
    def file_path(self) -> Path:
        """Location used when the file is created: the primary search directory."""

        return self._locator.primary / self.filename

    def locate(self) -> PrivateFile:
        """Return the existing file or raise ``NotFound``."""

        return self._locator.find(self.filename)

    def _ensure_absent(self) -> Path:
        target = self.file_path
        if target.exists():
            raise FileExistsError(f"File exists. ({target})")
        return target


class ConfigFileTask(_NamespacedFileTask):
    """Actions on the plain-text ``config.yml``.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> task = ConfigFileTask("moria", env={"XDG_CONFIG_DIRS": tmp.name})
    >>> task.create().read_text()
    '---\\n'
    >>> _ = task.edit("location: Moria\\n")
    >>> task.locate().read_text()
    'location: Moria\\n'
    >>> tmp.cleanup()
    """

    filename = CONFIG_FILE_NAME

    def create(self) -> Path:
        """Write :data:`CONFIG_TEMPLATE` to :attr:`file_path` and return the path.

        Raises
        ------
        FileExistsError
            When the file already exists in the primary directory.
        """

        target = self._ensure_absent()
        write_private(target, CONFIG_TEMPLATE.encode("utf-8"))
        log_info("file_created", source="config", path=str(target))
        return target

    def edit(self, content: str | None = None) -> Path:
        """Replace the file with *content*, or open it in the editor when ``None``.

        Raises
        ------
        NotFound
            When no search directory holds ``config.yml``.
        """

        config_file = self.locate()
        if content is not None:
            config_file.path.write_text(content, encoding="utf-8")
        else:
            self._editor(filename=str(config_file.path))
        log_info("file_saved", source="config", path=str(config_file))
        return config_file.path


class SecretsFileTask(_NamespacedFileTask):
    """Actions on the encrypted ``secrets.yml``.

    Parameters
    ----------
    namespace:
        Directory name appended to every search path.
    env:
        Environment mapping for the search paths and the master key variable.
    codec:
        Cipher used for the file; defaults to :class:`AesGcmCodec`.
    key_resolver:
        Source of the current key for ``edit`` and ``rotate``.
    master_key:
        Explicit key that takes precedence over every other source.
    editor:
        ``click.edit`` compatible callable used when no content is piped in.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> env = {"XDG_CONFIG_DIRS": tmp.name}
    >>> path, key = SecretsFileTask("moria", env=env).create()
    >>> task = SecretsFileTask("moria", env=env, master_key=key)
    >>> _ = task.edit("pass: mellon\\n")
    >>> task.read(key)
    'pass: mellon\\n'
    >>> tmp.cleanup()
    """

    filename = SECRETS_FILE_NAME

    def __init__(
        self,
        namespace: str,
        *,
        env: Mapping[str, str] | None = None,
        codec: SecretCodec | None = None,
        key_resolver: KeyResolver | None = None,
        master_key: str | None = None,
        editor: Callable[..., str | None] | None = None,
    ) -> None:
        super().__init__(namespace, env=env, editor=editor)
        self._codec = codec or AesGcmCodec()
        self._key_resolver = key_resolver or KeyResolver(environ=env)
        self._master_key = master_key

    def create(self, content: str = SECRETS_TEMPLATE) -> tuple[Path, str]:
        """Encrypt *content* under a fresh key into :attr:`file_path`.

        Returns
        -------
        tuple[Path, str]
            The created file and the generated key. The key is not stored
            anywhere; the caller must hand it to the user.

        Raises
        ------
        FileExistsError
            When the file already exists in the primary directory.
        """

        target = self._ensure_absent()
        key = self._codec.generate_key()
        write_private(target, self._encrypt(key, content))
        log_info("file_created", source="secrets", path=str(target))
        return target, key

    def edit(self, content: str | None = None) -> Path:
        """Re-encrypt the file with new plaintext under its current key.

        When *content* is ``None`` the decrypted text is opened in the editor;
        closing the editor without saving leaves the file unchanged.

        Raises
        ------
        NotFound
            When no search directory holds ``secrets.yml``.
        SecretsFileDecryptionError
            When no key is available or it does not open the file.
        """

        secrets_file = self.locate()
        key = self._current_key(secrets_file)
        if content is None:
            content = self._editor(self._decrypt(key, secrets_file), extension=".yml")
            if content is None:
                return secrets_file.path
        else:
            self._decrypt(key, secrets_file)
        secrets_file.path.write_bytes(self._encrypt(key, content))
        log_info("file_saved", source="secrets", path=str(secrets_file))
        return secrets_file.path

    def rotate(self) -> tuple[Path, str]:
        """Re-encrypt the file in place under a newly generated key.

        The current file is moved to ``secrets.yml.tmp`` while the new one is
        written. On failure the swap file is moved back and the error is
        re-raised; on success it is deleted.

        Returns
        -------
        tuple[Path, str]
            The rewritten file and the new key.
        """

        secrets_file = self.locate()
        plaintext = self._decrypt(self._current_key(secrets_file), secrets_file)

        target = secrets_file.path
        swap = target.with_name(target.name + SWAP_SUFFIX)
        target.rename(swap)
        try:
            key = self._codec.generate_key()
            write_private(target, self._encrypt(key, plaintext))
        except BaseException:
            swap.replace(target)
            raise
        swap.unlink()
        log_info("secrets_rotated", source="secrets", path=str(target))
        return target, key

    def read(self, key: str) -> str:
        """Return the decrypted text of the current file using *key*."""

        return self._decrypt(key, self.locate())

    def _current_key(self, secrets_file: PrivateFile) -> str:
        return self._key_resolver.resolve(self._master_key, None, self._locator, purpose=str(secrets_file))

    def _encrypt(self, key: str, content: str) -> bytes:
        try:
            return self._codec.encrypt(key, content)
        except InvalidKeyError as exc:
            raise SecretsFileEncryptionError(str(exc)) from exc

    def _decrypt(self, key: str, secrets_file: PrivateFile) -> str:
        try:
            return self._codec.decrypt(key, secrets_file.read_bytes()).decode("utf-8")
        except InvalidKeyError as exc:
            raise SecretsFileDecryptionError(f"Failed to open {secrets_file}. {exc}.") from exc
        except DecryptionFailedError as exc:
            raise SecretsFileDecryptionError(
                f"Failed to open {secrets_file}. Perhaps you used the wrong file decryption key?"
            ) from exc
