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

"""Public validation entry points."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Optional

from .compiler import Validators, validate_schema
from .exceptions import ValidationError
from .walker import walk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate`: either ``value`` or ``error`` is set."""

    value: Optional[Dict[Hashable, Any]] = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> Dict[Hashable, Any]:
        """Return the validated value, or raise the validation error."""
        if self.error is not None:
            raise self.error
        return self.value


def validate(data: Any, schema: Any, *, validators: Validators = None) -> ValidationResult:
    """Validate ``data`` against ``schema``.

    ``schema`` may be raw or compiled; raw schemas are compiled on every
    call, so compile once with :func:`spector.validate_schema` when
    validating repeatedly.

    Returns:
        A :class:`ValidationResult`. Invalid data never raises.

    Raises:
        SchemaError: If ``schema`` is malformed.
        CustomValidatorError: If a custom validator misbehaves.
    """
    compiled = validate_schema(schema, validators=validators)
    try:
        value = walk(data, compiled)
    except ValidationError as error:
        logger.debug("Validation failed: %s", error)
        return ValidationResult(error=error)
    return ValidationResult(value=value)


def validate_or_raise(data: Any, schema: Any, *, validators: Validators = None) -> Dict[Hashable, Any]:
    """Like :func:`validate`, but returns the value directly and raises
    :class:`~spector.exceptions.ValidationError` if the data is invalid."""
    return validate(data, schema, validators=validators).unwrap()
