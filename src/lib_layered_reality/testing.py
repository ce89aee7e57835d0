"""Test helpers that let suites shadow configuration values.

Purpose
    Production scopes are immutable. Test suites still need to try a code path
    with a different database host or feature flag without rewriting files, so
    this module owns the one capability that can activate a scope's override
    layer.

Contents
    - ``TestableScope``: wrapper that activates the override layer of a
      :class:`~lib_layered_reality.domain.scope.Scope` and exposes ``pretend``.
    - ``pretend``: functional shortcut returning a ``TestableScope``.

System Integration
    Typically used from a :class:`~lib_layered_reality.core.RealityContext`
    ``after_load`` hook so overrides are in place before schema validation, or
    directly on ``reality.config`` inside a test. Production code never
    imports this module.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from .domain.scope import Scope, _freeze_value, _normalize_key


class TestableScope:
    """Scope wrapper whose :meth:`pretend` shadows values in place.

    Why
        Overrides must be visible through every existing reference to the
        scope (including ``reality.config``), not only through a copy.
    What
        Activates the override slot of the wrapped scope on construction.
        Reads are delegated to the scope, so ``fetch``, ``/``, ``[]``,
        ``to_mapping`` and membership all see pretend values first. The base
        data is never modified.

    Examples
    --------
    >>> scope = Scope({"event": "party"})
    >>> testable = TestableScope(scope).pretend(EVENT="funeral", host="gandalf")
    >>> scope.fetch("event"), scope.fetch("host")
    ('funeral', 'gandalf')
    >>> testable.to_mapping()
    {'event': 'funeral', 'host': 'gandalf'}
    >>> testable.reset().to_mapping()
    {'event': 'party'}
    """

    __test__ = False
    __slots__ = ("_scope",)

    def __init__(self, scope: Scope | TestableScope) -> None:
        if isinstance(scope, TestableScope):
            scope = scope.scope
        if not isinstance(scope, Scope):
            raise TypeError(f"TestableScope wraps a Scope, got {type(scope).__name__}")
        scope._activate_overrides()
        self._scope = scope

    @property
    def scope(self) -> Scope:
        """The wrapped scope, now carrying an active override layer."""

        return self._scope

    def pretend(self, pairs: Mapping[str, Any] | None = None, /, **kwargs: Any) -> TestableScope:
        """Shadow each key in *pairs* and *kwargs* with its value and return ``self`` for chaining.

        Pass a mapping, keywords, or both; keyword values win on a shared key.
        Keys are matched case-insensitively. Mapping values become child
        scopes and lists become tuples, exactly like loaded data.
        """

        overrides = self._scope._activate_overrides()
        for key, value in {**(pairs or {}), **kwargs}.items():
            overrides[_normalize_key(key)] = _freeze_value(value)
        return self

    def reset(self) -> TestableScope:
        """Drop every pretend value while keeping the override layer active."""

        self._scope._activate_overrides().clear()
        return self

    def fetch(self, key: str) -> Any:
        return self._scope.fetch(key)

    __getitem__ = fetch
    __truediv__ = fetch

    def __contains__(self, key: object) -> bool:
        return key in self._scope

    def __iter__(self) -> Iterator[str]:
        return iter(self._scope)

    def __len__(self) -> int:
        return len(self._scope)

    def __getattr__(self, name: str) -> Any:
        if name == "_scope":
            raise AttributeError(name)
        return getattr(self._scope, name)

    def __repr__(self) -> str:
        return f"TestableScope({self._scope!r})"


def pretend(scope: Scope | TestableScope, pairs: Mapping[str, Any] | None = None, /, **kwargs: Any) -> TestableScope:
    """Wrap *scope* and shadow *pairs* and *kwargs* in one call.

    Examples
    --------
    >>> scope = Scope({"host": "bilbo"})
    >>> _ = pretend(scope, host="frodo")
    >>> scope / "host"
    'frodo'
    """

    return TestableScope(scope).pretend(pairs, **kwargs)


__all__ = ["TestableScope", "pretend"]
