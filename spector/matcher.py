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

"""Type matching: one compiled type descriptor against one value.

``match`` either returns the (possibly updated) value or raises
:class:`~spector.exceptions.ValidationError`. Nested schemas attached to a
key are walked by :mod:`spector.walker`; the matcher only walks the inline
schemas of the ``or``/``list`` shorthand.
"""

from __future__ import annotations

import inspect
import logging
import subprocess
import weakref
from collections.abc import Mapping
from dataclasses import dataclass
from multiprocessing.process import BaseProcess
from typing import Any, Callable, Dict, Hashable, List, Tuple

from .exceptions import CustomValidatorError, ValidationError
from .types import (
    ANY,
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
)

logger = logging.getLogger(__name__)


# -------------------------
# Synthetic key positions
# -------------------------


@dataclass(frozen=True)
class MapKeyPosition:
    pass


@dataclass(frozen=True)
class MapValuePosition:
    key: Any


@dataclass(frozen=True)
class ListPosition:
    index: int


@dataclass(frozen=True)
class TuplePosition:
    index: int


def render_key(key: Any) -> str:
    if isinstance(key, MapKeyPosition):
        return "map key"
    if isinstance(key, MapValuePosition):
        return f"map key {key.key!r}"
    if isinstance(key, TuplePosition):
        return f"tuple element at position {key.index}"
    if isinstance(key, ListPosition):
        return f"list element at position {key.index}"
    return f"{key!r} key"


def _invalid(key: Any, value: Any, expected: str) -> ValidationError:
    return ValidationError(
        f"invalid value for {render_key(key)}: expected {expected}, got: {value!r}",
        key=key,
        value=value,
    )


# -------------------------
# Primitive predicates
# -------------------------


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_process(value: Any) -> bool:
    return isinstance(value, (BaseProcess, subprocess.Popen))


_PRIMITIVES: Dict[str, Tuple[Callable[[Any], bool], str]] = {
    "atom": (lambda v: isinstance(v, str) and v.isidentifier(), "atom"),
    "string": (lambda v: isinstance(v, str), "string"),
    "boolean": (lambda v: isinstance(v, bool), "boolean"),
    "integer": (_is_integer, "integer"),
    "non_neg_integer": (lambda v: _is_integer(v) and v >= 0, "non negative integer"),
    "pos_integer": (lambda v: _is_integer(v) and v >= 1, "positive integer"),
    "float": (lambda v: isinstance(v, float), "float"),
    "timeout": (
        lambda v: (isinstance(v, str) and v == "infinity") or (_is_integer(v) and v >= 0),
        "non-negative integer or 'infinity'",
    ),
    "pid": (_is_process, "pid"),
    "reference": (lambda v: isinstance(v, weakref.ReferenceType), "reference"),
    "null": (lambda v: v is None, "None"),
}


def _is_record(value: Any) -> bool:
    return isinstance(value, Mapping) and all(isinstance(k, str) for k in value)


# -------------------------
# Dispatch
# -------------------------


def match(type_spec: TypeSpec, key: Hashable, value: Any) -> Any:
    """Match ``value`` against ``type_spec``; return the validated value."""
    if isinstance(type_spec, BasicType):
        return _match_basic(type_spec.name, key, value)

    if isinstance(type_spec, ContainerType):
        value = _match_container(type_spec.kind, key, value)
        if type_spec.keys is not None:
            value = _walk_inline(type_spec, key, value)
        return value

    if isinstance(type_spec, MapOf):
        return _match_map_of(type_spec, key, value)

    if isinstance(type_spec, ListOf):
        return _match_list_of(type_spec, key, value)

    if isinstance(type_spec, TupleOf):
        return _match_tuple(type_spec, key, value)

    if isinstance(type_spec, OrType):
        return _match_or(type_spec, key, value)

    if isinstance(type_spec, CustomType):
        return _match_custom(type_spec, key, value)

    if isinstance(type_spec, InType):
        if not _in_choices(value, type_spec.choices):
            raise _invalid(key, value, f"one of {type_spec.choices!r}")
        return value

    if isinstance(type_spec, FunType):
        return _match_fun(type_spec.arity, key, value)

    if isinstance(type_spec, StructType):
        if not isinstance(value, type_spec.cls):
            raise _invalid(key, value, type_spec.cls.__qualname__)
        return value

    # Unknown descriptors never survive schema compilation.
    return value


def _match_basic(name: str, key: Hashable, value: Any) -> Any:
    if name == "any":
        return value
    check = _PRIMITIVES.get(name)
    if check is None:
        return value
    predicate, expected = check
    if not predicate(value):
        raise _invalid(key, value, expected)
    return value


def _match_container(kind: str, key: Hashable, value: Any) -> Any:
    if kind == "map":
        return _match_map_of(MapOf(BasicType("string"), ANY), key, value)

    expected = "list of mappings" if kind == "list" else "non-empty list of mappings"
    if not isinstance(value, list) or not all(_is_record(item) for item in value):
        raise _invalid(key, value, expected)
    if kind == "non_empty_list" and not value:
        raise _invalid(key, value, expected)
    return value


def _walk_inline(container: ContainerType, key: Hashable, value: Any) -> Any:
    from .walker import walk_nested

    return walk_nested(value, container.kind, container.keys, key)


def _match_map_of(type_spec: MapOf, key: Hashable, value: Any) -> Dict[Any, Any]:
    if not isinstance(value, Mapping):
        raise _invalid(key, value, "map")

    pairs: Dict[Any, Any] = {}
    for map_key, map_value in value.items():
        try:
            updated_key = match(type_spec.key_type, MapKeyPosition(), map_key)
            updated_value = match(type_spec.value_type, MapValuePosition(map_key), map_value)
        except ValidationError as error:
            raise ValidationError(
                f"invalid map in {render_key(key)}: {error.message}",
                key=key,
                value=value,
            ) from None
        pairs[updated_key] = updated_value
    return pairs


def _match_list_of(type_spec: ListOf, key: Hashable, value: Any) -> List[Any]:
    if not isinstance(value, list):
        raise _invalid(key, value, "list")

    subtype = type_spec.subtype
    inline = isinstance(subtype, ContainerType) and subtype.keys is not None
    updated: List[Any] = []
    for index, element in enumerate(value):
        position = ListPosition(index)
        try:
            if inline:
                element = _match_container(subtype.kind, position, element)
            else:
                element = match(subtype, position, element)
        except ValidationError as error:
            raise ValidationError(
                f"invalid list in {render_key(key)}: {error.message}",
                key=key,
                value=value,
            ) from None

        if inline:
            try:
                element = _walk_inline(subtype, key, element)
            except ValidationError as error:
                raise ValidationError(
                    f"invalid list element at position {index} in {render_key(key)}: {error}",
                    key=key,
                    value=value,
                ) from None
        updated.append(element)
    return updated


def _match_tuple(type_spec: TupleOf, key: Hashable, value: Any) -> Tuple[Any, ...]:
    if not isinstance(value, tuple):
        raise _invalid(key, value, "tuple")
    if len(value) != len(type_spec.subtypes):
        raise _invalid(key, value, f"tuple with {len(type_spec.subtypes)} elements")

    updated: List[Any] = []
    for index, (subtype, element) in enumerate(zip(type_spec.subtypes, value)):
        try:
            updated.append(match(subtype, TuplePosition(index), element))
        except ValidationError as error:
            raise ValidationError(
                f"invalid tuple in {render_key(key)}: {error.message}",
                key=key,
                value=value,
            ) from None
    return tuple(updated)


def _match_or(type_spec: OrType, key: Hashable, value: Any) -> Any:
    reasons: List[ValidationError] = []
    for subtype in type_spec.subtypes:
        try:
            return match(subtype, key, value)
        except ValidationError as error:
            reasons.append(error)

    message = (
        f"expected {render_key(key)} to match at least one given type, but didn't match "
        "any. Here are the reasons why it didn't match each of the allowed types:\n\n"
        + "\n".join(f"  * {reason}" for reason in reasons)
    )
    raise ValidationError(message, key=key, value=value)


def _in_choices(value: Any, choices: Any) -> bool:
    try:
        found = value in choices
    except TypeError:
        return False
    if not found or not isinstance(value, int):
        return found
    # True == 1 and False == 0, but a bool only matches a bool choice.
    if isinstance(choices, range):
        return not isinstance(value, bool)
    return any(
        choice == value and isinstance(choice, bool) == isinstance(value, bool) for choice in choices
    )


def _validator_name(type_spec: CustomType) -> str:
    validator = type_spec.validator
    module = getattr(validator, "__module__", None)
    name = getattr(validator, "__qualname__", None) or repr(validator)
    return f"{module}.{name}/{len(type_spec.args) + 1}" if module else f"{name}/{len(type_spec.args) + 1}"


def _match_custom(type_spec: CustomType, key: Hashable, value: Any) -> Any:
    try:
        updated = type_spec.validator(value, *type_spec.args)
    except ValidationError:
        raise
    except ValueError as exc:
        raise ValidationError(
            f"invalid value for {render_key(key)}: {exc}",
            key=key,
            value=value,
        ) from None
    except Exception as exc:
        raise CustomValidatorError(
            f"custom validation function {_validator_name(type_spec)} must return the "
            f"accepted value or raise ValueError, got: {exc!r}"
        ) from exc

    if updated is None and value is not None:
        raise CustomValidatorError(
            f"custom validation function {_validator_name(type_spec)} must return the "
            f"accepted value or raise ValueError, got: None for {value!r}"
        )
    return updated


def _positional_arity(signature: inspect.Signature) -> Tuple[int, float]:
    required = 0
    maximum: float = 0
    for parameter in signature.parameters.values():
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            maximum += 1
            if parameter.default is parameter.empty:
                required += 1
        elif parameter.kind == parameter.VAR_POSITIONAL:
            maximum = float("inf")
        elif parameter.kind == parameter.KEYWORD_ONLY and parameter.default is parameter.empty:
            # A required keyword-only argument can never be satisfied positionally.
            return required, -1
    return required, maximum


def _match_fun(arity: int, key: Hashable, value: Any) -> Any:
    if not callable(value):
        raise _invalid(key, value, f"function of arity {arity}")

    try:
        signature = inspect.signature(value)
    except (TypeError, ValueError):
        logger.debug("Cannot inspect signature of %r, accepting it as arity %d", value, arity)
        return value

    required, maximum = _positional_arity(signature)
    if not required <= arity <= maximum:
        raise ValidationError(
            f"invalid value for {render_key(key)}: expected function of arity {arity}, "
            f"got: function of arity {required}",
            key=key,
            value=value,
        )
    return value
