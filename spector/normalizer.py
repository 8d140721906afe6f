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

"""Turns a compiled schema into the concrete per-key schema for one input."""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, Iterable

from .schema import WILDCARD, KeySpec, LazySchema, Schema

logger = logging.getLogger(__name__)


def expand_wildcard(schema: Schema, observed_keys: Iterable[Hashable]) -> Schema:
    """Expand the ``"*"`` entry of ``schema`` to every observed key.

    Named keys keep their own spec and win over the wildcard. The expanded
    keys take the place of ``"*"`` in declaration order, in input order.
    A schema without a wildcard is returned unchanged.
    """
    wildcard = schema.wildcard
    if wildcard is None:
        return schema

    entries: Dict[Hashable, KeySpec] = {}
    for key, key_spec in schema.items():
        if key != WILDCARD:
            entries[key] = key_spec
            continue
        for observed in observed_keys:
            if observed == WILDCARD or observed not in schema:
                entries[observed] = wildcard
    return Schema(entries)


def resolve_keys(keys: Any) -> Schema:
    """Return the nested schema behind a ``keys`` attribute.

    Deferred producers are invoked on every call; raw results are compiled.
    """
    if isinstance(keys, Schema):
        return keys

    validators = None
    if isinstance(keys, LazySchema):
        validators = keys.validators
        keys = keys.producer()
    elif callable(keys):
        keys = keys()

    if isinstance(keys, Schema):
        return keys

    from .compiler import validate_schema

    logger.debug("Compiling lazily produced nested schema")
    return validate_schema(keys, validators=validators)
