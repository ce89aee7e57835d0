"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the composition
root can orchestrate behaviour without depending on concrete implementations.

Contents
--------
* :class:`PathResolver` – yields the ordered namespace search directories.
* :class:`Locator` – finds exactly one file in those directories.
* :class:`Decoder` – turns document bytes into a mapping.
* :class:`EnvLoader` – snapshots environment variables.
* :class:`SecretCodec` – authenticated encryption of the secrets payload.
* :class:`SchemaValidator` – validates the merged scopes.

System Role
-----------
These protocols enforce Dependency Inversion (DIP). Each adapter implements one
protocol and the contract tests in ``tests/adapters`` check it with
``isinstance``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class PathResolver(Protocol):
    """Compute the ordered search directories for a namespace."""

    @property
    def search_paths(self) -> tuple[Path, ...]:
        """Absolute directories, primary location first."""


@runtime_checkable
class Locator(Protocol):
    """Locate exactly one file by basename."""

    @property
    def search_paths(self) -> tuple[Path, ...]:
        """Directories consulted by :meth:`find`."""

    def find(self, basename: str, ext: str | None = None) -> Any:
        """Return a permission-guarded file or raise ``NotFound`` / ``AmbiguousSourceError``."""


@runtime_checkable
class Decoder(Protocol):
    """Decode a structured document."""

    def decode(self, payload: bytes | str, *, source: str) -> Mapping[str, object]:
        """Return the mapping in *payload* or raise ``InvalidFormat``."""


@runtime_checkable
class EnvLoader(Protocol):
    """Snapshot environment variables with lower-cased keys."""

    def load(self) -> Mapping[str, str]:
        """Return the flat environment mapping."""


@runtime_checkable
class SecretCodec(Protocol):
    """Opaque authenticated encryption keyed by a symmetric key."""

    def generate_key(self) -> str:
        """Return a new random key."""

    def encrypt(self, key: str, plaintext: bytes | str) -> bytes:
        """Encrypt *plaintext* or raise ``InvalidKeyError``."""

    def decrypt(self, key: str, ciphertext: bytes) -> bytes:
        """Decrypt *ciphertext* or raise ``InvalidKeyError`` / ``DecryptionFailedError``."""


@runtime_checkable
class SchemaValidator(Protocol):
    """Validate the config and secrets scopes together."""

    def validate(self, configs: Mapping[str, Any], secrets: Mapping[str, Any]) -> None:
        """Raise ``SchemaValidationError`` listing every violation."""
