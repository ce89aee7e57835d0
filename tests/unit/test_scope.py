"""Scope value object tests covering lookup, immutability and rendering."""

from __future__ import annotations

import copy
import dataclasses
import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_layered_reality.domain.errors import ImmutableRealityError, InvalidFormat, UnknownKeyError
from lib_layered_reality.domain.scope import Scope

KEY = st.text(alphabet="abcdefgh_", min_size=1, max_size=6)
SCALAR = st.one_of(st.booleans(), st.integers(), st.text(max_size=5), st.none())
VALUE = st.recursive(
    SCALAR,
    lambda children: st.one_of(
        st.dictionaries(KEY, children, max_size=3),
        st.lists(children, max_size=3),
    ),
    max_leaves=10,
)
MAPPING = st.dictionaries(KEY, VALUE, max_size=4)


def make_scope() -> Scope:
    return Scope({"Event": "party", "host": "bilbo", "database": {"Host": "localhost", "ports": [5432, 5433]}})


def test_lookup_ignores_letter_case() -> None:
    scope = make_scope()
    assert scope.fetch("EVENT") == "party"
    assert scope["event"] == "party"
    assert scope / "Host" == "bilbo"


def test_nested_mappings_are_child_scopes() -> None:
    scope = make_scope()
    database = scope / "database"
    assert isinstance(database, Scope)
    assert database / "HOST" == "localhost"


def test_lists_are_frozen_to_tuples() -> None:
    assert make_scope() / "database" / "ports" == (5432, 5433)


def test_missing_key_lists_known_keys() -> None:
    scope = Scope({"event": "party", "host": "bilbo"})
    with pytest.raises(UnknownKeyError) as excinfo:
        scope.fetch("quest")
    assert str(excinfo.value) == "key not found: :quest. Known keys are :event, :host."


def test_missing_key_in_empty_scope_renders_none() -> None:
    with pytest.raises(UnknownKeyError, match=r"Known keys are \(none\)\.$"):
        Scope().fetch("quest")


def test_unknown_key_error_is_a_key_error() -> None:
    with pytest.raises(KeyError):
        Scope()["missing"]


def test_key_exists_and_membership() -> None:
    scope = make_scope()
    assert scope.key_exists("EVENT")
    assert "database" in scope
    assert "quest" not in scope


def test_iteration_and_length_cover_lower_cased_keys() -> None:
    scope = make_scope()
    assert sorted(scope) == ["database", "event", "host"]
    assert len(scope) == 3
    assert sorted(scope.keys()) == ["database", "event", "host"]


def test_dotted_get() -> None:
    scope = make_scope()
    assert scope.get("database.host") == "localhost"
    assert scope.get("database.user") is None
    assert scope.get("database.user", default="gandalf") == "gandalf"
    assert scope.get("event.host", default=0) == 0


def test_fields_cannot_be_reassigned() -> None:
    scope = make_scope()
    with pytest.raises(dataclasses.FrozenInstanceError):
        scope._data = {}  # type: ignore[misc]


def test_stored_data_cannot_be_mutated() -> None:
    scope = make_scope()
    with pytest.raises(TypeError):
        scope._data["event"] = "funeral"  # type: ignore[index]


def test_to_mapping_returns_independent_copy() -> None:
    scope = make_scope()
    mapping = scope.to_mapping()
    assert mapping == {
        "event": "party",
        "host": "bilbo",
        "database": {"host": "localhost", "ports": [5432, 5433]},
    }
    mapping["database"]["host"] = "remote"
    mapping["database"]["ports"].append(1)
    assert scope / "database" / "host" == "localhost"
    assert scope / "database" / "ports" == (5432, 5433)


def test_source_mutation_does_not_leak_into_scope() -> None:
    source = {"database": {"host": "localhost"}}
    scope = Scope(source)
    source["database"]["host"] = "remote"
    assert scope / "database" / "host" == "localhost"


def test_to_json_serialises_nested_values() -> None:
    payload = json.loads(make_scope().to_json(indent=2))
    assert payload["database"]["ports"] == [5432, 5433]


def test_repr_hides_values() -> None:
    rendered = repr(Scope({"pass": "mellon"}))
    assert "mellon" not in rendered
    assert "pass" in rendered


def test_pretend_requires_testing_extension() -> None:
    with pytest.raises(ImmutableRealityError) as excinfo:
        make_scope().pretend(event="funeral")
    assert "lib_layered_reality.testing" in str(excinfo.value)
    assert isinstance(excinfo.value, AttributeError)


@pytest.mark.parametrize(
    "args, kwargs",
    [(({"event": "funeral"},), {}), ((), {"event": "funeral"}), (({"event": "funeral"},), {"host": "gandalf"}), ((), {})],
)
def test_pretend_refuses_every_call_form(args: tuple, kwargs: dict) -> None:
    with pytest.raises(ImmutableRealityError, match="lib_layered_reality.testing"):
        make_scope().pretend(*args, **kwargs)


def test_keys_colliding_after_case_folding_are_rejected() -> None:
    with pytest.raises(InvalidFormat, match=":host"):
        Scope({"Host": "a", "HOST": "b"})


def test_non_mapping_data_is_rejected() -> None:
    with pytest.raises(InvalidFormat):
        Scope(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_non_string_keys_are_stringified() -> None:
    assert Scope({1: "one"}).fetch("1") == "one"


@given(MAPPING)
def test_structurally_equal_mappings_give_equal_scopes(data) -> None:
    assert Scope(data) == Scope(copy.deepcopy(data))


@given(MAPPING)
def test_to_mapping_restores_lower_cased_input(data) -> None:
    assert Scope(data).to_mapping() == data


@given(MAPPING)
def test_upper_cased_lookups_match(data) -> None:
    scope = Scope(data)
    for key in data:
        assert scope.key_exists(key.upper())
