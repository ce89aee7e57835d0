"""Composition root for ``lib_layered_reality``.

Purpose
-------
Provide the single entry point that orchestrates file location, permission
checks, key resolution, decryption, environment merging and schema validation,
and hands the caller an immutable :class:`Reality`.

Contents
--------
* :data:`CONFIG_FILE_NAME` / :data:`SECRETS_FILE_NAME` – basenames searched in
  every namespace directory.
* :class:`RealityContext` – explicit per-load inputs (master key override,
  environment snapshot, stdin, prompt, after-load hooks).
* :class:`Reality` – aggregate root holding the ``config`` and ``secrets``
  scopes.
* :func:`load_reality` – functional alias of the :class:`Reality` constructor.

System Role
-----------
This module connects the adapters (locator, decoder, codec, key resolver,
environment loader) with the domain scopes while emitting structured
observability signals. It is the canonical location for adjusting the load
sequence.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Final, Mapping, TextIO

from pydantic import BaseModel

from .adapters.env.default import DefaultEnvLoader
from .adapters.file_loaders.structured import YAMLDecoder
from .adapters.file_locator.default import FileLocator
from .adapters.secrets.codec import AesGcmCodec
from .adapters.secrets.key_resolver import KeyResolver
from .application.merge import merge_environment
from .application.validation import RealityValidator
from .domain.errors import (
    DecryptionFailedError,
    ImmutableRealityError,
    InvalidKeyError,
    MissingConfigFileError,
    MissingSecretsFileError,
    NotFound,
    SecretsFileDecryptionError,
    UnknownScopeError,
)
from .domain.scope import Scope
from .observability import bind_trace_id, log_error, log_info, make_event

#: Plain-text configuration file looked up in the namespace directories.
CONFIG_FILE_NAME: Final[str] = "config.yml"

#: Encrypted secrets file looked up in the namespace directories.
SECRETS_FILE_NAME: Final[str] = "secrets.yml"

_SCOPE_NAME = re.compile(r"(config|secret)s?", re.IGNORECASE)

_DECODER = YAMLDecoder()


@dataclass(frozen=True, slots=True)
class RealityContext:
    """Explicit inputs for a single :class:`Reality` load.

    Why
    ----
    Tests and embedding applications need to inject a key, an environment or
    post-load hooks without touching process-wide state.

    Attributes
    ----------
    master_key:
        Key used before any other source when not ``None``.
    environ:
        Environment snapshot. Defaults to a copy of :data:`os.environ` taken at
        load time.
    stdin:
        Stream whose ``isatty`` decides whether the key may be prompted for.
    prompt:
        Callable used instead of :func:`getpass.getpass` to ask for the key.
    after_load:
        Callables invoked with the frozen :class:`Reality` before validation.
    """

    master_key: str | None = None
    environ: Mapping[str, str] | None = None
    stdin: TextIO | None = None
    prompt: Callable[[str], str] | None = None
    after_load: tuple[Callable[["Reality"], None], ...] = ()


class Reality:
    """Immutable view over the ``config`` and ``secrets`` scopes of a namespace.

    Why
    ----
    Applications want one object that proves configuration and secrets were
    found, permission-checked, decrypted, merged with the environment and
    validated before any of it is read.

    What
    ----
    Performs the whole load in the constructor. Once built, attribute
    assignment raises :class:`ImmutableRealityError` (an ``AttributeError``)
    and both scopes are read-only.

    Parameters
    ----------
    namespace:
        Directory name appended to every XDG search path.
    decryption_keyfile:
        Basename of the key file; defaults to ``master_key``.
    configs_schema / secrets_schema:
        Optional ``pydantic`` models validated against the loaded scopes.
    context:
        Optional :class:`RealityContext` with injected inputs.

    Raises
    ------
    MissingConfigFileError / MissingSecretsFileError
        When a file does not exist in any search path.
    AmbiguousSourceError
        When a file exists in more than one search path.
    FilePermissionsError
        When a file is readable by others.
    EnvConfigCollisionError
        When the environment and ``config.yml`` share a key.
    SecretsFileDecryptionError
        When no usable key is found or decryption fails.
    SchemaValidationError
        When a schema rejects the loaded data.

    Examples
    --------
    >>> import os
    >>> from pathlib import Path
    >>> from tempfile import TemporaryDirectory
    >>> from pydantic import BaseModel
    >>> from lib_layered_reality.adapters.secrets.codec import AesGcmCodec
    >>> class Configs(BaseModel):
    ...     location: str
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "moria"
    >>> target.mkdir()
    >>> codec = AesGcmCodec()
    >>> key = codec.generate_key()
    >>> _ = (target / "config.yml").write_text("location: Moria\\n", encoding="utf-8")
    >>> _ = (target / "secrets.yml").write_bytes(codec.encrypt(key, "pass: mellon\\n"))
    >>> for name in ("config.yml", "secrets.yml"):
    ...     os.chmod(target / name, 0o600)
    >>> context = RealityContext(master_key=key, environ={"XDG_CONFIG_DIRS": tmp.name})
    >>> reality = Reality("moria", configs_schema=Configs, context=context)
    >>> reality / "CONFIGS" / "location"
    'Moria'
    >>> reality.fetch("secret").fetch("pass")
    'mellon'
    >>> tmp.cleanup()
    """

    __slots__ = ("_namespace", "_config", "_secrets")

    def __init__(
        self,
        namespace: str,
        decryption_keyfile: str | None = None,
        configs_schema: type[BaseModel] | None = None,
        secrets_schema: type[BaseModel] | None = None,
        *,
        context: RealityContext | None = None,
    ) -> None:
        context = context or RealityContext()
        environ = dict(os.environ if context.environ is None else context.environ)

        bind_trace_id(None)
        locator = FileLocator(namespace, env=environ)

        env = DefaultEnvLoader(environ=environ).load()
        config = Scope(merge_environment(_load_config(locator), env))
        secrets = Scope(_load_secrets(locator, decryption_keyfile, context, environ))

        object.__setattr__(self, "_namespace", locator.namespace)
        object.__setattr__(self, "_config", config)
        object.__setattr__(self, "_secrets", secrets)

        for hook in context.after_load:
            hook(self)

        RealityValidator(configs_schema, secrets_schema, env_keys=env).validate(
            config.to_mapping(), secrets.to_mapping()
        )
        log_info(
            "reality_loaded",
            **make_event("reality", None, {"namespace": locator.namespace, "config_keys": len(config)}),
        )

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def config(self) -> Scope:
        """Scope built from ``config.yml`` plus the environment variables."""

        return self._config

    @property
    def secrets(self) -> Scope:
        """Scope built from the decrypted ``secrets.yml``."""

        return self._secrets

    def fetch(self, name: str) -> Scope:
        """Return a root scope by name.

        ``config``, ``configs``, ``secret`` and ``secrets`` are accepted in any
        letter case.

        Raises
        ------
        UnknownScopeError
            For any other name.
        """

        match = _SCOPE_NAME.fullmatch(name) if isinstance(name, str) else None
        if match is None:
            raise UnknownScopeError("The root scope name must be either config or secret.")
        return self._config if match.group(1).lower() == "config" else self._secrets

    __getitem__ = fetch
    __truediv__ = fetch

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutableRealityError(f"Reality is immutable; cannot set attribute {name!r}")

    def __delattr__(self, name: str) -> None:
        raise ImmutableRealityError(f"Reality is immutable; cannot delete attribute {name!r}")

    def __repr__(self) -> str:
        return f"Reality(namespace={self._namespace!r})"


def load_reality(
    namespace: str,
    decryption_keyfile: str | None = None,
    configs_schema: type[BaseModel] | None = None,
    secrets_schema: type[BaseModel] | None = None,
    *,
    context: RealityContext | None = None,
) -> Reality:
    """Return ``Reality(namespace, ...)``; functional spelling of the constructor."""

    return Reality(
        namespace,
        decryption_keyfile,
        configs_schema,
        secrets_schema,
        context=context,
    )


def _load_config(locator: FileLocator) -> Mapping[str, object]:
    """Locate, permission-check and decode ``config.yml``.

    Raises
    ------
    MissingConfigFileError
        When the file exists in none of the search paths.
    """

    try:
        config_file = locator.find(CONFIG_FILE_NAME)
    except NotFound:
        raise MissingConfigFileError(
            f"No config file found. Create {CONFIG_FILE_NAME} in one of these locations: "
            f"{locator.describe_search_paths()}"
        ) from None
    return _DECODER.decode(config_file.read_bytes(), source=str(config_file))


def _load_secrets(
    locator: FileLocator,
    key_filename: str | None,
    context: RealityContext,
    environ: Mapping[str, str],
) -> Mapping[str, object]:
    """Locate, decrypt and decode ``secrets.yml``.

    The secrets file is read (and permission-checked) before the key is
    resolved so a missing or exposed file is reported without prompting.
    """

    try:
        secrets_file = locator.find(SECRETS_FILE_NAME)
    except NotFound:
        raise MissingSecretsFileError(
            f"No secrets file found. Create encrypted {SECRETS_FILE_NAME} in one of these locations: "
            f"{locator.describe_search_paths()}"
        ) from None

    ciphertext = secrets_file.read_bytes()
    resolver = KeyResolver(environ=environ, stdin=context.stdin, prompt=context.prompt)
    key = resolver.resolve(context.master_key, key_filename, locator, purpose=SECRETS_FILE_NAME)

    try:
        plaintext = AesGcmCodec().decrypt(key, ciphertext)
    except InvalidKeyError as exc:
        log_error("secrets_decryption_failed", source="secrets", path=str(secrets_file), reason="invalid_key")
        raise SecretsFileDecryptionError(f"Failed to open {secrets_file}. {exc}.") from exc
    except DecryptionFailedError as exc:
        log_error("secrets_decryption_failed", source="secrets", path=str(secrets_file), reason="authentication")
        raise SecretsFileDecryptionError(
            f"Failed to open {secrets_file}. Perhaps you used the wrong file decryption key?"
        ) from exc

    log_info("secrets_decrypted", source="secrets", path=str(secrets_file))
    return _DECODER.decode(plaintext, source=str(secrets_file))


__all__ = [
    "CONFIG_FILE_NAME",
    "SECRETS_FILE_NAME",
    "Reality",
    "RealityContext",
    "load_reality",
]
