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

"""Custom exceptions for spector."""

from typing import Any, Hashable, Iterable, Tuple


class SpectorError(Exception):
    """Base exception for spector related errors."""
    pass


class ValidationError(SpectorError):
    """Raised (or returned) when data does not conform to a schema.

    Attributes:
        key: The offending key or synthetic position. For unknown keys this is
            the list of unknown keys.
        value: The invalid value (``None`` for presence and unknown-key errors).
        message: Human-readable description of the failure.
        keys_path: Enclosing keys, outermost first. Empty at the point of failure.
    """

    def __init__(
        self,
        message: str,
        *,
        key: Any = None,
        value: Any = None,
        keys_path: Iterable[Hashable] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.key = key
        self.value = value
        self.keys_path: Tuple[Hashable, ...] = tuple(keys_path)

    def prepend_path(self, *segments: Hashable) -> "ValidationError":
        """Return a copy of this error with ``segments`` in front of its path."""
        if not segments:
            return self
        return ValidationError(
            self.message,
            key=self.key,
            value=self.value,
            keys_path=segments + self.keys_path,
        )

    def __str__(self) -> str:
        if self.keys_path:
            return f"{self.message} (in keys {list(self.keys_path)!r})"
        return self.message

    def __repr__(self) -> str:
        return (
            f"ValidationError(key={self.key!r}, value={self.value!r}, "
            f"message={self.message!r}, keys_path={list(self.keys_path)!r})"
        )


class SchemaError(SpectorError):
    """Exception raised when a schema definition itself is malformed."""
    pass


class CustomValidatorError(SpectorError):
    """Exception raised when a custom validator misbehaves.

    This signals a bug in the validator, not bad input, and is never
    reported as a validation result.
    """
    pass


class DocumentError(SpectorError):
    """Exception raised when a YAML/JSON document cannot be read or decoded."""
    pass
