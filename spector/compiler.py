# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Schema compilation.

A raw schema is validated against the meta-schema (the schema of key
specs, expressed with the engine's own types) and turned into an immutable
:class:`~spector.schema.Schema`. Malformed schemas are reported here, never
at data-validation time.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Hashable, Optional, Sequence

from .exceptions import SchemaError, ValidationError
from .matcher import match, render_key
from .schema import KeySpec, LazySchema, Schema
from .types import (
    ANY,
    BASIC_TYPES,
    CONTAINER_TYPES,
    MAP,
    TYPE_SPEC_CLASSES,
    BasicType,
    ContainerType,
    CustomType,
    FunType,
    InType,
    ListOf,
    MapOf,
    OrType,
    StructType,
    TupleOf,
    TypeSpec,
    available_types,
    describe,
    is_container,
)
from .walker import validate_value, walk

logger = logging.getLogger(__name__)

Validators = Optional[Mapping[str, Callable[..., Any]]]

_CHOICE_TYPES = (list, tuple, set, frozenset, range)


# -------------------------
# Type descriptors
# -------------------------


def compile_type(raw: Any, validators: Validators = None) -> TypeSpec:
    """Compile a raw type descriptor.

    Raises:
        SchemaError: If ``raw`` is not a valid type descriptor.
    """
    try:
        return _compile_type(raw, validators)
    except (ValueError, ValidationError) as exc:
        raise SchemaError(str(exc)) from exc


def _unknown_type(raw: Any) -> ValueError:
    return ValueError(f"unknown type {raw!r}.\n\nAvailable types: {available_types()}")


def _compile_type(raw: Any, validators: Validators) -> TypeSpec:
    if isinstance(raw, TYPE_SPEC_CLASSES):
        return raw

    if raw is None:
        return BasicType("null")

    if isinstance(raw, str):
        if raw in BASIC_TYPES:
            return BasicType(raw)
        if raw in CONTAINER_TYPES:
            return ContainerType(raw)
        raise _unknown_type(raw)

    if isinstance(raw, Mapping):
        if len(raw) != 1:
            raise _unknown_type(raw)
        ((name, param),) = raw.items()
        if not isinstance(name, str):
            raise _unknown_type(raw)
        params = _mapping_params(name, param)
        return _compile_parameterized(name, params, validators, raw)

    if isinstance(raw, tuple) and raw and isinstance(raw[0], str):
        return _compile_parameterized(raw[0], raw[1:], validators, raw)

    raise _unknown_type(raw)


def _mapping_params(name: str, param: Any) -> Sequence[Any]:
    # {"map": [K, V]} and {"custom": [validator, [args]]} spread their list.
    if name in ("map", "custom") and isinstance(param, (list, tuple)):
        return tuple(param)
    return (param,)


def _is_inline_keys(param: Any) -> bool:
    return isinstance(param, Mapping) and len(param) == 1 and "keys" in param


def _compile_parameterized(
    name: str, params: Sequence[Any], validators: Validators, raw: Any
) -> TypeSpec:
    if name in CONTAINER_TYPES and len(params) == 1 and _is_inline_keys(params[0]):
        return ContainerType(name, keys=_compile_keys(params[0]["keys"], validators))

    if name == "list" and len(params) == 1:
        try:
            return ListOf(_compile_type(params[0], validators))
        except ValueError as exc:
            raise ValueError(f"invalid subtype given to list type: {exc}") from None

    if name == "map" and len(params) == 2:
        key_type, value_type = params
        try:
            compiled_key_type = _compile_type(key_type, validators)
        except ValueError as exc:
            raise ValueError(f"invalid key_type for map type: {exc}") from None
        try:
            compiled_value_type = _compile_type(value_type, validators)
        except ValueError as exc:
            raise ValueError(f"invalid value_type for map type: {exc}") from None
        return MapOf(compiled_key_type, compiled_value_type)

    if name == "or" and len(params) == 1 and isinstance(params[0], (list, tuple)):
        subtypes = []
        for subtype in params[0]:
            try:
                subtypes.append(_compile_type(subtype, validators))
            except ValueError as exc:
                raise ValueError(f"invalid type given to or type: {exc}") from None
        return OrType(tuple(subtypes))

    if name == "tuple" and len(params) == 1 and isinstance(params[0], (list, tuple)):
        subtypes = []
        for subtype in params[0]:
            try:
                subtypes.append(_compile_type(subtype, validators))
            except ValueError as exc:
                raise ValueError(f"invalid subtype given to tuple type: {exc}") from None
        return TupleOf(tuple(subtypes))

    if name == "fun" and len(params) == 1:
        arity = params[0]
        if isinstance(arity, int) and not isinstance(arity, bool) and arity >= 0:
            return FunType(arity)
        raise ValueError(f"invalid arity for fun type, expected non-negative integer, got: {arity!r}")

    if name == "in" and len(params) == 1:
        return InType(_compile_choices(params[0]))

    if name == "custom" and len(params) in (1, 2):
        return _compile_custom(params, validators)

    if name == "struct" and len(params) == 1:
        return StructType(_resolve_class(params[0]))

    raise _unknown_type(raw)


def _compile_choices(choices: Any) -> Any:
    if not isinstance(choices, _CHOICE_TYPES):
        raise ValueError(
            f"invalid choices for in type, expected a list, tuple, set or range, got: {choices!r}"
        )
    if isinstance(choices, list):
        return tuple(choices)
    if isinstance(choices, set):
        return frozenset(choices)
    return choices


def _compile_custom(params: Sequence[Any], validators: Validators) -> CustomType:
    validator = params[0]
    args = params[1] if len(params) == 2 else ()

    if isinstance(validator, str):
        if not validators or validator not in validators:
            available = sorted(validators) if validators else []
            raise ValueError(
                f"unknown custom validator {validator!r}, available validators: {available!r}"
            )
        validator = validators[validator]

    if not callable(validator):
        raise ValueError(f"invalid custom validator, expected a callable, got: {validator!r}")
    if not isinstance(args, (list, tuple)):
        raise ValueError(f"invalid arguments for custom validator, expected a list, got: {args!r}")
    return CustomType(validator, tuple(args))


def _resolve_class(target: Any) -> type:
    if isinstance(target, type):
        return target
    if isinstance(target, str) and "." in target:
        module_name, _, attr = target.rpartition(".")
        try:
            resolved = getattr(importlib.import_module(module_name), attr)
        except (ImportError, AttributeError) as exc:
            raise ValueError(f"cannot import struct class {target!r}: {exc}") from None
        if isinstance(resolved, type):
            return resolved
    raise ValueError(f"invalid struct_name for struct, expected a class, got: {target!r}")


def _compile_keys(raw: Any, validators: Validators) -> Any:
    if isinstance(raw, (Schema, LazySchema)):
        return raw
    if callable(raw) and not isinstance(raw, Mapping):
        return LazySchema(raw, validators)
    return _compile_schema(raw, validators)


# -------------------------
# Meta-schema
# -------------------------


def _false(value: Any) -> bool:
    if value is not False:
        raise ValueError(f"expected false, got: {value!r}")
    return value


def _key_spec_schema(validators: Validators) -> Schema:
    string_or_false = OrType((BasicType("string"), CustomType(_false)))
    return Schema(
        {
            "type": KeySpec(
                type=CustomType(_compile_type, (validators,)),
                default="any",
                doc="The type of the key.",
            ),
            "required": KeySpec(
                type=BasicType("boolean"),
                default=False,
                doc="Defines if the key is required.",
            ),
            "default": KeySpec(
                type=ANY,
                doc="The value used when the key is absent. It is validated against `type`.",
            ),
            "keys": KeySpec(
                type=CustomType(_compile_keys, (validators,)),
                doc=(
                    "Available for `map`, `list` and `non_empty_list`: the nested schema, or a "
                    "zero-argument callable producing it. Use `*` to match arbitrary keys."
                ),
            ),
            "deprecated": KeySpec(
                type=BasicType("string"),
                doc="Message logged as a warning whenever the key is supplied.",
            ),
            "doc": KeySpec(type=string_or_false, doc="The documentation for the key."),
            "subsection": KeySpec(
                type=BasicType("string"),
                doc="The title of a separate subsection of the documentation.",
            ),
            "type_doc": KeySpec(
                type=string_or_false,
                doc="The type documentation to show for the key, or `false` for none.",
            ),
            "type_spec": KeySpec(type=ANY, doc="The type signature to show for the key."),
        }
    )


def meta_schema(validators: Validators = None) -> Schema:
    """The schema every raw schema is validated against."""
    return Schema({"*": KeySpec(type=MAP, keys=_key_spec_schema(validators))})


# -------------------------
# Schemas
# -------------------------


def _compile_schema(raw: Any, validators: Validators) -> Schema:
    if isinstance(raw, Schema):
        return raw
    if not isinstance(raw, Mapping):
        raise ValidationError(f"expected schema to be a mapping, got: {raw!r}", value=raw)

    prepared = {
        key: spec.to_dict() if isinstance(spec, KeySpec) else spec for key, spec in raw.items()
    }
    normalized = walk(prepared, meta_schema(validators))

    entries: Dict[Hashable, KeySpec] = {}
    for key, attributes in normalized.items():
        key_spec = KeySpec(**attributes)
        _check_key_spec(key, key_spec)
        entries[key] = key_spec
    return Schema(entries)


def _check_key_spec(key: Hashable, key_spec: KeySpec) -> None:
    if key_spec.keys is not None and not is_container(key_spec.type):
        raise ValidationError(
            "invalid value for 'keys' key: keys is only available for map, list and "
            f"non_empty_list types, got type: {describe(key_spec.type)}",
            key="keys",
            value=key_spec.keys,
            keys_path=(key,),
        )

    if key_spec.has_default:
        try:
            if isinstance(key_spec.keys, LazySchema):
                # Deferred schemas are only resolved once the default is used.
                match(key_spec.type, key, key_spec.default)
            else:
                validate_value(key, key_spec, key_spec.default)
        except ValidationError as error:
            raise ValidationError(
                f"invalid default for {render_key(key)}: {error}",
                key="default",
                value=key_spec.default,
                keys_path=(key,),
            ) from None


def validate_schema(raw: Any, *, validators: Validators = None) -> Schema:
    """Validate a raw schema and return its compiled form.

    Args:
        raw: A raw schema mapping, or an already compiled :class:`Schema`
            (returned unchanged).
        validators: Named custom validators that ``{"custom": "<name>"}``
            descriptors may refer to.

    Raises:
        SchemaError: If the schema is malformed.
    """
    if isinstance(raw, Schema):
        return raw

    try:
        schema = _compile_schema(raw, validators)
    except ValidationError as error:
        raise SchemaError(f"invalid schema. Reason: {error}") from error

    logger.debug("Compiled schema with keys %s", list(schema))
    return schema
