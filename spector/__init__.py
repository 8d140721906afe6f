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

"""Schema-driven structural validation of nested mappings."""

from .compiler import compile_type, meta_schema, validate_schema
from .exceptions import (
    CustomValidatorError,
    DocumentError,
    SchemaError,
    SpectorError,
    ValidationError,
)
from .loaders import load_document, load_schema, parse_document, validate_file, validate_text
from .schema import NO_DEFAULT, WILDCARD, KeySpec, LazySchema, Schema
from .validation import ValidationResult, validate, validate_or_raise

__version__ = "0.1.0"

__all__ = [
    "CustomValidatorError",
    "DocumentError",
    "KeySpec",
    "LazySchema",
    "NO_DEFAULT",
    "Schema",
    "SchemaError",
    "SpectorError",
    "ValidationError",
    "ValidationResult",
    "WILDCARD",
    "compile_type",
    "load_document",
    "load_schema",
    "meta_schema",
    "parse_document",
    "validate",
    "validate_file",
    "validate_or_raise",
    "validate_schema",
    "validate_text",
]
