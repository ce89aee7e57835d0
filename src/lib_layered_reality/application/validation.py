"""Schema validation across the config and secrets scopes.

Purpose
-------
Check the merged ``{configs, secrets}`` structure against caller-supplied
``pydantic`` models and report every violation at once.

Rules
-----
* The config schema defaults to an empty model. It is re-derived with
  ``extra="forbid"`` on every nested model so unknown keys are rejected at
  any depth, and every observed
  environment key is added as an optional, aliased field so arbitrary
  environment variables never count as unknown.
* Without a secrets schema the ``secrets`` entry only has to be present as a
  mapping. A supplied secrets schema is also made strict.
* All violations are aggregated into one :class:`SchemaValidationError`.

System Role
-----------
Run by :class:`lib_layered_reality.core.Reality` after it has frozen, as a
pure read of both scopes.
"""

from __future__ import annotations

import operator
from copy import copy
from functools import reduce
from types import UnionType
from typing import Any, Iterable, Literal, Mapping, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from ..domain.errors import SchemaValidationError
from ..observability import log_debug, log_error


class EmptySchema(BaseModel):
    """Config schema used when the caller supplies none: no required keys."""


class RealityValidator:
    """Validate config and secrets mappings against their schemas.

    Examples
    --------
    >>> from pydantic import BaseModel
    >>> class Configs(BaseModel):
    ...     location: str
    >>> validator = RealityValidator(Configs, None, env_keys=["home"])
    >>> validator.validate({"location": "Moria", "home": "/home/frodo"}, {})
    >>> validator.validate({"home": "/home/frodo"}, {})
    Traceback (most recent call last):
    ...
    lib_layered_reality.domain.errors.SchemaValidationError: Validation errors:
       :configs / :location Field required
    """

    def __init__(
        self,
        configs_schema: type[BaseModel] | None,
        secrets_schema: type[BaseModel] | None,
        *,
        env_keys: Iterable[str] = (),
    ) -> None:
        configs_model = _with_environment(_strict(configs_schema or EmptySchema), env_keys)
        secrets_type: Any = _strict(secrets_schema) if secrets_schema is not None else dict[str, Any]
        self._schema = create_model(
            "RealitySchema",
            __config__=ConfigDict(extra="forbid"),
            configs=(configs_model, ...),
            secrets=(secrets_type, ...),
        )

    def validate(self, configs: Mapping[str, Any], secrets: Mapping[str, Any]) -> None:
        """Raise :class:`SchemaValidationError` unless both mappings satisfy their schemas."""

        try:
            self._schema.model_validate({"configs": dict(configs), "secrets": dict(secrets)})
        except ValidationError as exc:
            violations = [(_render_path(error["loc"]), error["msg"]) for error in exc.errors()]
            log_error("schema_invalid", source="schema", path=None, violations=[path for path, _ in violations])
            raise SchemaValidationError(_render_message(violations), violations) from exc
        log_debug("schema_validated", source="schema", path=None)


def _strict(schema: type[BaseModel], _building: set[type[BaseModel]] | None = None) -> type[BaseModel]:
    """Return a subclass of *schema* that rejects unknown keys at every depth.

    Nested models are rebuilt the same way wherever they appear in a field
    type, including inside ``list``, ``dict``, ``Optional`` and unions. A model
    that refers to itself keeps its own ``extra`` setting at the point of
    recursion.
    """

    building = set() if _building is None else _building
    overrides: dict[str, Any] = {}
    if schema not in building:
        building.add(schema)
        try:
            for name, field in schema.model_fields.items():
                annotation = _strict_annotation(field.annotation, building)
                if annotation is not field.annotation:
                    overrides[name] = (annotation, copy(field))
        finally:
            building.discard(schema)

    class Strict(schema):  # type: ignore[misc, valid-type]
        model_config = ConfigDict(extra="forbid")

    Strict.__name__ = Strict.__qualname__ = schema.__name__
    if not overrides:
        return Strict
    return create_model(schema.__name__, __base__=Strict, __module__=schema.__module__, **overrides)


def _strict_annotation(annotation: Any, building: set[type[BaseModel]]) -> Any:
    """Return *annotation* with every model it mentions replaced by its strict form."""

    origin = get_origin(annotation)
    if origin is None:
        if isinstance(annotation, type) and issubclass(annotation, BaseModel):
            return _strict(annotation, building)
        return annotation
    if origin is Literal:
        return annotation

    args = get_args(annotation)
    strict_args = tuple(_strict_annotation(arg, building) for arg in args)
    if all(new is old for new, old in zip(strict_args, args)):
        return annotation
    if origin is UnionType:
        return reduce(operator.or_, strict_args)
    return origin[strict_args]


def _with_environment(schema: type[BaseModel], env_keys: Iterable[str]) -> type[BaseModel]:
    """Extend *schema* with an optional field for every undeclared environment key.

    Field names are generated and the real variable name is used as the alias,
    so names that are not valid identifiers (or start with ``_``) still work.
    """

    declared = set(schema.model_fields)
    declared.update(field.alias for field in schema.model_fields.values() if field.alias)

    fields: dict[str, Any] = {}
    index = 0
    for key in sorted(set(env_keys)):
        if key in declared:
            continue
        name = f"environment_{index}"
        while name in declared:
            index += 1
            name = f"environment_{index}"
        fields[name] = (Any, Field(default=None, alias=key))
        index += 1
    if not fields:
        return schema
    return create_model(f"{schema.__name__}WithEnvironment", __base__=schema, **fields)


def _render_path(loc: Iterable[Any]) -> str:
    """Render a pydantic location tuple as ``:configs / :database / :host``."""

    return " / ".join(f":{part}" for part in loc)


def _render_message(violations: Iterable[tuple[str, str]]) -> str:
    lines = "\n".join(f"   {path} {message}" for path, message in violations)
    return f"Validation errors:\n{lines}"
