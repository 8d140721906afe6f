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

"""Structural walk of an input mapping against a compiled schema."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Dict, Hashable, Sequence, Tuple

from .exceptions import ValidationError
from .matcher import match, render_key
from .normalizer import expand_wildcard, resolve_keys
from .schema import KeySpec, Schema
from .types import ContainerType

logger = logging.getLogger(__name__)


def walk(data: Any, schema: Schema, path: Sequence[Hashable] = ()) -> Dict[Hashable, Any]:
    """Validate ``data`` against ``schema`` and return a new normalized dict.

    Fails fast: the first key (in schema order) that does not validate
    aborts the walk. Errors raised from here carry ``path`` in front of
    their ``keys_path``.
    """
    try:
        return _walk_level(data, schema)
    except ValidationError as error:
        raise error.prepend_path(*path) from None


def _walk_level(data: Any, schema: Schema) -> Dict[Hashable, Any]:
    if not isinstance(data, Mapping):
        raise ValidationError(f"expected a mapping, got: {data!r}", value=data)

    schema = expand_wildcard(schema, data.keys())
    _check_unknown_keys(data, schema)

    output: Dict[Hashable, Any] = {}
    for key, key_spec in schema.items():
        present, value = validate_key(data, key, key_spec)
        if present:
            output[key] = value
    return output


def _check_unknown_keys(data: Mapping, schema: Schema) -> None:
    unknown = [key for key in data if key not in schema]
    if unknown:
        raise ValidationError(
            f"unknown keys {unknown!r}, valid keys are: {list(schema)!r}",
            key=unknown,
        )


def validate_key(data: Mapping, key: Hashable, key_spec: KeySpec) -> Tuple[bool, Any]:
    """Validate one declared key. Returns ``(present, value)``."""
    if key in data:
        if key_spec.deprecated:
            logger.warning("%s is deprecated. %s", render_key(key), key_spec.deprecated)
        value = data[key]
    elif key_spec.required:
        raise ValidationError(
            f"required {render_key(key)} not found, received keys: {list(data)!r}",
            key=key,
        )
    elif key_spec.has_default:
        # Each result gets its own copy of the default.
        value = copy.deepcopy(key_spec.default)
    else:
        return False, None

    return True, validate_value(key, key_spec, value)


def validate_value(key: Hashable, key_spec: KeySpec, value: Any) -> Any:
    value = match(key_spec.type, key, value)
    if key_spec.keys is not None:
        kind = key_spec.type.kind if isinstance(key_spec.type, ContainerType) else "map"
        value = walk_nested(value, kind, key_spec.keys, key)
    return value


def walk_nested(value: Any, kind: str, keys: Any, key: Hashable) -> Any:
    """Walk a container value against the nested schema behind ``keys``.

    Maps are walked once; lists are walked record by record with the
    record index added to the path.
    """
    nested = resolve_keys(keys)
    if kind == "map":
        return walk(value, nested, path=(key,))
    return [walk(record, nested, path=(key, index)) for index, record in enumerate(value)]
