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

"""Compiled type descriptors.

Every type a schema can declare is one of the frozen dataclasses below.
Raw spellings (``"integer"``, ``("or", [...])``, ``{"list": "string"}``)
are turned into these by :func:`spector.compiler.compile_type`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union


BASIC_TYPES = (
    "any",
    "atom",
    "string",
    "boolean",
    "integer",
    "non_neg_integer",
    "pos_integer",
    "float",
    "timeout",
    "pid",
    "reference",
    "null",
)

CONTAINER_TYPES = ("map", "list", "non_empty_list")

PARAMETERIZED_TYPES = (
    "{fun: arity}",
    "{in: choices}",
    "{or: [subtypes]}",
    "{custom: validator}",
    "{list: subtype}",
    "{tuple: [subtypes]}",
    "{map: [key_type, value_type]}",
    "{struct: class}",
)


@dataclass(frozen=True)
class BasicType:
    name: str


@dataclass(frozen=True)
class ContainerType:
    """``map``, ``list`` or ``non_empty_list``.

    ``keys`` is only set for the inline shorthand used inside ``or`` and
    ``list`` subtypes, e.g. ``("or", ["boolean", ("map", {...})])``.
    """

    kind: str
    keys: Any = None


@dataclass(frozen=True)
class MapOf:
    key_type: "TypeSpec"
    value_type: "TypeSpec"


@dataclass(frozen=True)
class FunType:
    arity: int


@dataclass(frozen=True)
class InType:
    choices: Any


@dataclass(frozen=True)
class CustomType:
    validator: Callable[..., Any]
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class OrType:
    subtypes: Tuple["TypeSpec", ...]


@dataclass(frozen=True)
class ListOf:
    subtype: "TypeSpec"


@dataclass(frozen=True)
class TupleOf:
    subtypes: Tuple["TypeSpec", ...]


@dataclass(frozen=True)
class StructType:
    cls: type


TypeSpec = Union[
    BasicType,
    ContainerType,
    MapOf,
    FunType,
    InType,
    CustomType,
    OrType,
    ListOf,
    TupleOf,
    StructType,
]

TYPE_SPEC_CLASSES = (
    BasicType,
    ContainerType,
    MapOf,
    FunType,
    InType,
    CustomType,
    OrType,
    ListOf,
    TupleOf,
    StructType,
)

ANY = BasicType("any")
MAP = ContainerType("map")


def is_container(type_spec: Optional[TypeSpec]) -> bool:
    return isinstance(type_spec, ContainerType)


def available_types() -> str:
    return ", ".join(list(BASIC_TYPES) + list(CONTAINER_TYPES) + list(PARAMETERIZED_TYPES))


def describe(type_spec: TypeSpec) -> str:
    """Short human-readable rendering of a compiled type, used in messages."""
    if isinstance(type_spec, BasicType):
        return type_spec.name
    if isinstance(type_spec, ContainerType):
        return type_spec.kind
    if isinstance(type_spec, MapOf):
        return f"map({describe(type_spec.key_type)}, {describe(type_spec.value_type)})"
    if isinstance(type_spec, FunType):
        return f"fun({type_spec.arity})"
    if isinstance(type_spec, InType):
        return f"in({type_spec.choices!r})"
    if isinstance(type_spec, CustomType):
        return f"custom({getattr(type_spec.validator, '__qualname__', type_spec.validator)!s})"
    if isinstance(type_spec, OrType):
        return "or(" + ", ".join(describe(t) for t in type_spec.subtypes) + ")"
    if isinstance(type_spec, ListOf):
        return f"list({describe(type_spec.subtype)})"
    if isinstance(type_spec, TupleOf):
        return "tuple(" + ", ".join(describe(t) for t in type_spec.subtypes) + ")"
    if isinstance(type_spec, StructType):
        return type_spec.cls.__qualname__
    return repr(type_spec)
