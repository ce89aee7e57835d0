"""Public package surface for ``lib_layered_reality``.

``Reality`` (or :func:`load_reality`) is the one entry point applications need:
it finds ``config.yml`` and the encrypted ``secrets.yml`` for a namespace,
merges the environment, validates both scopes and returns an immutable view.
The error classes are re-exported so callers can catch them without reaching
into subpackages. Test helpers live in :mod:`lib_layered_reality.testing` and
are deliberately not imported here.
"""

from __future__ import annotations

from .core import CONFIG_FILE_NAME, SECRETS_FILE_NAME, Reality, RealityContext, load_reality
from .domain.errors import (
    AmbiguousSourceError,
    ConfigurationError,
    DecryptionFailedError,
    EnvConfigCollisionError,
    FilePermissionsError,
    ImmutableRealityError,
    InvalidFormat,
    InvalidKeyError,
    InvalidNamespaceError,
    MissingConfigFileError,
    MissingSecretsFileError,
    NotFound,
    RealityError,
    SchemaValidationError,
    SecretsFileDecryptionError,
    SecretsFileEncryptionError,
    SecurityError,
    UnknownKeyError,
    UnknownScopeError,
)
from .domain.scope import Scope
from .observability import bind_trace_id, get_logger

__all__ = [
    "CONFIG_FILE_NAME",
    "SECRETS_FILE_NAME",
    "Reality",
    "RealityContext",
    "load_reality",
    "Scope",
    "bind_trace_id",
    "get_logger",
    "RealityError",
    "ConfigurationError",
    "SecurityError",
    "AmbiguousSourceError",
    "DecryptionFailedError",
    "EnvConfigCollisionError",
    "FilePermissionsError",
    "ImmutableRealityError",
    "InvalidFormat",
    "InvalidKeyError",
    "InvalidNamespaceError",
    "MissingConfigFileError",
    "MissingSecretsFileError",
    "NotFound",
    "SchemaValidationError",
    "SecretsFileDecryptionError",
    "SecretsFileEncryptionError",
    "UnknownKeyError",
    "UnknownScopeError",
]
