"""Domain-level scope value object.

Purpose
-------
Anchor the immutable :class:`Scope` that carries decoded configuration and
secrets through the system. This module belongs to the domain layer and
contains no I/O.

Contents
--------
* :class:`Scope` – ``Mapping`` implementation with case-insensitive lookup,
  eager recursive wrapping of nested mappings, and an inert override slot that
  only :mod:`lib_layered_reality.testing` may activate.
* :func:`_freeze_mapping` / :func:`_freeze_value` – one-time conversion of raw
  decoded data into immutable structures.
* :func:`_thaw_mapping` / :func:`_thaw_value` – the reverse trip used by
  :meth:`Scope.to_mapping`.

System Role
-----------
:class:`lib_layered_reality.core.Reality` wraps the decoded ``config.yml`` and
``secrets.yml`` payloads in scopes. Chained lookups
(``reality / "config" / "database" / "host"``) never re-parse nested data
because every child mapping is already a :class:`Scope`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, TypeVar, overload

from .errors import ImmutableRealityError, InvalidFormat, UnknownKeyError

T = TypeVar("T")

_NO_KEYS = "(none)"


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Scope(MappingABC[str, Any]):
    """Immutable, case-insensitive lookup table over a decoded mapping.

    Why
    ----
    Applications need read-only, tree-shaped access to configuration and
    secrets that tolerates ``HOST`` / ``host`` spelling differences and fails
    with a helpful list of known keys.

    What
    ----
    Stores lower-cased keys inside a ``MappingProxyType``. Nested mappings are
    converted into child scopes and sequences into tuples during
    initialisation, so immutability is transitive. The ``_overrides`` slot stays
    ``None`` in production; the testing extension turns it into a shadow layer.

    Parameters
    ----------
    _data:
        Raw decoded mapping, or ``None`` for an empty scope.

    Examples
    --------
    >>> scope = Scope({"Database": {"Host": "localhost"}, "ports": [5432]})
    >>> scope.fetch("database").fetch("HOST")
    'localhost'
    >>> scope / "DATABASE" / "host"
    'localhost'
    >>> scope["ports"]
    (5432,)
    >>> scope.to_mapping()
    {'database': {'host': 'localhost'}, 'ports': [5432]}
    """

    _data: Mapping[str, Any] | None = None
    _overrides: dict[str, Any] | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        """Freeze the incoming data.

        Side Effects
        ------------
        Mutates the dataclass fields via ``object.__setattr__`` during
        initialisation only.
        """

        object.__setattr__(self, "_data", _freeze_mapping(self._data))

    def fetch(self, key: str) -> Any:
        """Return the value stored under *key*, consulting overrides first.

        Parameters
        ----------
        key:
            Key in any letter case.

        Raises
        ------
        UnknownKeyError
            When neither the override layer nor the base data holds *key*. The
            message lists the known keys (and pretend keys when the override
            layer is active).

        Examples
        --------
        >>> scope = Scope({"event": "party", "host": "bilbo"})
        >>> scope.fetch("EVENT")
        'party'
        >>> scope.fetch("quest")
        Traceback (most recent call last):
        ...
        lib_layered_reality.domain.errors.UnknownKeyError: key not found: :quest. Known keys are :event, :host.
        """

        name = _normalize_key(key)
        if self._overrides is not None and name in self._overrides:
            return self._overrides[name]
        try:
            return self._data[name]  # type: ignore[index]
        except KeyError:
            raise UnknownKeyError(self._missing_message(name)) from None

    __getitem__ = fetch
    __truediv__ = fetch

    def key_exists(self, key: str) -> bool:
        """Return ``True`` when *key* resolves in the override layer or base data."""

        name = _normalize_key(key)
        if self._overrides is not None and name in self._overrides:
            return True
        return name in self._data  # type: ignore[operator]

    def __contains__(self, key: object) -> bool:
        return self.key_exists(key)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[str]:
        """Iterate over base keys followed by keys that only exist as overrides."""

        yield from self._data  # type: ignore[misc]
        if self._overrides:
            for name in self._overrides:
                if name not in self._data:  # type: ignore[operator]
                    yield name

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        # Values are left out so secrets never reach logs or tracebacks.
        return f"Scope(keys={sorted(self)!r})"

    @overload
    def get(self, key: str, *, default: T) -> T:  # type: ignore[override]
        ...

    @overload
    def get(self, key: str, *, default: None = ...) -> Any | None:  # type: ignore[override]
        ...

    def get(self, key: str, *, default: Any = None) -> Any:
        """Resolve *key* as a dotted path and return ``default`` when missing.

        Examples
        --------
        >>> scope = Scope({"service": {"timeout": 5}})
        >>> scope.get("SERVICE.timeout")
        5
        >>> scope.get("service.retries", default=3)
        3
        """

        current: Any = self
        for part in key.split("."):
            if not isinstance(current, Scope) or not current.key_exists(part):
                return default
            current = current.fetch(part)
        return current

    def to_mapping(self) -> dict[str, Any]:
        """Return a plain, mutable ``dict`` copy reflecting overrides at every depth.

        Examples
        --------
        >>> Scope({"a": {"b": (1, 2)}}).to_mapping()
        {'a': {'b': [1, 2]}}
        """

        merged: dict[str, Any] = dict(self._data)  # type: ignore[arg-type]
        if self._overrides:
            merged.update(self._overrides)
        return _thaw_mapping(merged)

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise :meth:`to_mapping` to JSON.

        Examples
        --------
        >>> Scope({"service": {"timeout": 5}}).to_json()
        '{"service":{"timeout":5}}'
        """

        return json.dumps(self.to_mapping(), indent=indent, separators=(",", ":"), ensure_ascii=False, default=str)

    def pretend(self, pairs: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:
        """Refuse to override values outside of the testing extension, in either call form.

        Raises
        ------
        ImmutableRealityError
            Always; use :class:`lib_layered_reality.testing.TestableScope`.
        """

        raise ImmutableRealityError(ImmutableRealityError.PRETEND_MSG)

    def _activate_overrides(self) -> dict[str, Any]:
        """Return the override layer, creating it on first use."""

        if self._overrides is None:
            object.__setattr__(self, "_overrides", {})
        return self._overrides  # type: ignore[return-value]

    def _missing_message(self, name: str) -> str:
        message = f"key not found: :{name}. Known keys are {_render_keys(self._data)}."  # type: ignore[arg-type]
        if self._overrides is not None:
            message += f" Pretend keys are: {_render_keys(self._overrides)}."
        return message


def _normalize_key(key: object) -> str:
    """Return the canonical lower-case text form of *key*."""

    return str(key).lower()


def _render_keys(mapping: Mapping[str, Any]) -> str:
    """Render sorted keys as ``:a, :b`` or ``(none)`` when empty."""

    if not mapping:
        return _NO_KEYS
    return ", ".join(f":{name}" for name in sorted(mapping))


def _freeze_mapping(data: Mapping[Any, Any] | None) -> Mapping[str, Any]:
    """Return an immutable proxy of *data* with normalised keys and frozen values.

    Raises
    ------
    InvalidFormat
        When *data* is not a mapping or two keys differ only by letter case.
    """

    if data is None:
        return MappingProxyType({})
    if not isinstance(data, MappingABC):
        raise InvalidFormat(f"Scope data must be a mapping, got {type(data).__name__}")
    frozen: dict[str, Any] = {}
    for key, value in data.items():
        name = _normalize_key(key)
        if name in frozen:
            raise InvalidFormat(f"Duplicate key :{name} (keys are case-insensitive)")
        frozen[name] = _freeze_value(value)
    return MappingProxyType(frozen)


def _freeze_value(value: Any) -> Any:
    """Wrap nested mappings as scopes and sequences as tuples.

    Examples
    --------
    >>> _freeze_value([1, [2, 3]])
    (1, (2, 3))
    """

    if isinstance(value, Scope):
        return value
    if isinstance(value, MappingABC):
        return Scope(value)
    if isinstance(value, (list, tuple)):
        return tuple(_freeze_value(item) for item in value)
    return value


def _thaw_mapping(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively convert frozen values back into plain containers."""

    return {key: _thaw_value(value) for key, value in mapping.items()}


def _thaw_value(value: Any) -> Any:
    """Clone a frozen value into its mutable counterpart.

    Examples
    --------
    >>> _thaw_value((1, (2, 3)))
    [1, [2, 3]]
    """

    if isinstance(value, Scope):
        return value.to_mapping()
    if isinstance(value, tuple):
        return [_thaw_value(item) for item in value]
    return value

