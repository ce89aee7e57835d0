from __future__ import annotations

import pytest

from lib_layered_reality.domain.errors import (
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

CONFIGURATION_ERRORS = (
    InvalidNamespaceError,
    NotFound,
    AmbiguousSourceError,
    MissingConfigFileError,
    MissingSecretsFileError,
    EnvConfigCollisionError,
    InvalidFormat,
    SchemaValidationError,
)
SECURITY_ERRORS = (
    SecretsFileDecryptionError,
    SecretsFileEncryptionError,
    InvalidKeyError,
    DecryptionFailedError,
)


@pytest.mark.parametrize("error_type", CONFIGURATION_ERRORS)
def test_configuration_errors_share_a_base(error_type) -> None:
    assert issubclass(error_type, ConfigurationError)
    assert issubclass(error_type, RealityError)


@pytest.mark.parametrize("error_type", SECURITY_ERRORS)
def test_security_errors_share_a_base(error_type) -> None:
    assert issubclass(error_type, SecurityError)
    assert issubclass(error_type, RealityError)


def test_file_permissions_error_carries_path_and_mode() -> None:
    error = FilePermissionsError("bad", path="/tmp/config.yml", mode=0o644)
    assert isinstance(error, SecurityError)
    assert error.path == "/tmp/config.yml"
    assert error.mode == 0o644


def test_builtin_compatibility() -> None:
    assert issubclass(InvalidNamespaceError, ValueError)
    assert issubclass(InvalidKeyError, ValueError)
    assert issubclass(UnknownScopeError, ValueError)
    assert issubclass(UnknownKeyError, KeyError)
    assert issubclass(ImmutableRealityError, AttributeError)


def test_unknown_key_error_renders_without_quotes() -> None:
    assert str(UnknownKeyError("key not found: :quest.")) == "key not found: :quest."


def test_schema_validation_error_keeps_violations() -> None:
    error = SchemaValidationError("Validation errors:", [(":configs / :host", "Field required")])
    assert error.violations == ((":configs / :host", "Field required"),)
