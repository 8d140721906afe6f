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

"""Compiled schema data model.

This module intentionally holds data only; compilation lives in
:mod:`spector.compiler` and traversal in :mod:`spector.walker`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, Optional, Tuple, Union

from .types import ANY, TypeSpec


WILDCARD = "*"


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __reduce__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class LazySchema:
    """A nested schema produced on demand by a zero-argument callable."""

    producer: Callable[[], Any]
    validators: Optional[Mapping] = None


@dataclass(frozen=True)
class KeySpec:
    type: TypeSpec = ANY
    required: bool = False
    default: Any = NO_DEFAULT
    keys: Union["Schema", LazySchema, Callable[[], Any], None] = None
    deprecated: Optional[str] = None

    # Documentation-only attributes
    doc: Union[str, bool, None] = None
    subsection: Optional[str] = None
    type_doc: Union[str, bool, None] = None
    type_spec: Any = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def to_dict(self) -> Dict[str, Any]:
        """Raw form of this key spec, listing only the attributes that are set."""
        raw: Dict[str, Any] = {"type": self.type, "required": self.required}
        for item in fields(self):
            if item.name in raw:
                continue
            value = getattr(self, item.name)
            if value is NO_DEFAULT or (value is None and item.name != "default"):
                continue
            raw[item.name] = value
        return raw


class Schema(Mapping):
    """An immutable, ordered mapping of key -> :class:`KeySpec`.

    Build one with :func:`spector.validate_schema`; the constructor itself
    does not validate its entries.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Union[Mapping, Iterable[Tuple[Hashable, KeySpec]]] = ()) -> None:
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, key: Hashable) -> KeySpec:
        return self._entries[key]

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def wildcard(self) -> Optional[KeySpec]:
        return self._entries.get(WILDCARD)

    def __repr__(self) -> str:
        return f"Schema({dict(self._entries)!r})"
