"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the composition root, the
CLI tasks, and consuming applications. The hierarchy lives in the domain layer
so outer layers may depend on it without creating import cycles.

Contents
--------
* :class:`RealityError` – umbrella base class for every library failure.
* :class:`ConfigurationError` – namespace, file discovery, collision, format,
  and schema problems.
* :class:`SecurityError` – permission, key, and cryptographic failures.
* :class:`UnknownKeyError` / :class:`UnknownScopeError` – lookup failures.
* :class:`ImmutableRealityError` – test-only capability used outside tests.

System Role
-----------
Every error is raised at the point of detection with a self-contained message
(offending path or key plus, where relevant, the search paths tried). Nothing
here is downgraded to a warning; only :mod:`lib_layered_reality.cli` turns
selected errors into an exit status.
"""

from __future__ import annotations

from typing import Sequence


class RealityError(Exception):
    """Base type for all exceptions emitted by ``lib_layered_reality``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class ConfigurationError(RealityError):
    """Problems with the shape or location of configuration sources."""


class SecurityError(RealityError):
    """Problems that would expose or fail to unlock protected material."""


class InvalidNamespaceError(ConfigurationError, ValueError):
    """Raised when the namespace is ``None`` or an empty string."""


class NotFound(ConfigurationError):
    """Raised when a basename exists in none of the search directories.

    Why
    ----
    Callers such as :class:`lib_layered_reality.core.Reality` and the CLI
    tasks translate this into a more specific, actionable error.
    """


class AmbiguousSourceError(ConfigurationError):
    """Raised when the same basename exists in more than one search directory.

    Resolve it by deciding on one correct location and removing the alternate
    file(s).
    """

    HINT = "Choose 1 correct one and delete the others."


class MissingConfigFileError(ConfigurationError):
    """Raised when no ``config.yml`` can be found within the search paths."""


class MissingSecretsFileError(ConfigurationError):
    """Raised when no ``secrets.yml`` can be found within the search paths."""


class EnvConfigCollisionError(ConfigurationError):
    """Raised when a key is defined in both the environment and the config file."""

    HINT = "Either rename your config entry or remove the environment variable."


class InvalidFormat(ConfigurationError):
    """Raised when a decoded document is malformed or not a mapping."""


class SchemaValidationError(ConfigurationError):
    """Raised when the merged scopes violate their schemas.

    Attributes
    ----------
    violations:
        Every ``(path, message)`` pair reported by the validator, in order.
    """

    def __init__(self, message: str, violations: Sequence[tuple[str, str]] = ()) -> None:
        super().__init__(message)
        self.violations = tuple(violations)


class FilePermissionsError(SecurityError):
    """Raised when a protected file has permission bits outside the allow-list."""

    def __init__(self, message: str, *, path: str, mode: int) -> None:
        super().__init__(message)
        self.path = path
        self.mode = mode


class SecretsFileDecryptionError(SecurityError):
    """Raised when the secrets file cannot be decrypted or its key cannot be found."""


class SecretsFileEncryptionError(SecurityError):
    """Raised when content cannot be encrypted, usually because of a bad key."""


class InvalidKeyError(SecurityError, ValueError):
    """Raised by the codec when a key is empty, malformed, or the wrong length."""


class DecryptionFailedError(SecurityError):
    """Raised by the codec for a wrong key or corrupted ciphertext."""


class UnknownKeyError(RealityError, KeyError):
    """Raised when a :class:`~lib_layered_reality.domain.scope.Scope` lacks a key.

    ``KeyError`` quotes its argument in ``str()``; this subclass renders the
    plain message so the known-keys hint reads naturally.
    """

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownScopeError(RealityError, ValueError):
    """Raised when a root scope name is neither ``config`` nor ``secret``."""


class ImmutableRealityError(RealityError, AttributeError):
    """Raised on attempts to change a loaded reality.

    Covers attribute assignment on :class:`~lib_layered_reality.core.Reality` and
    calls to ``pretend`` on a plain scope, which is meant for test suites only.
    """

    HINT = "Wrap the scope with lib_layered_reality.testing.TestableScope in your test suite."
    PRETEND_MSG = f"Method 'Scope.pretend' is provided by the testing extension. {HINT}"
