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

"""YAML/JSON adapters: decode documents and schemas, then hand them to the core."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import jsonschema
import yaml

from .compiler import Validators, validate_schema
from .config import spector_config
from .exceptions import DocumentError, SchemaError
from .schema import Schema
from .source_map import SourceMap, build_source_map
from .validation import ValidationResult, validate

logger = logging.getLogger(__name__)

FORMATS = ("yaml", "json")

# Schema cache to avoid reloading files
_SCHEMA_CACHE: Dict[str, dict] = {}


def format_for(path: Path) -> str:
    """Guess the document format from a file suffix (YAML unless ``.json``)."""
    return "json" if path.suffix.lower() == ".json" else "yaml"


class DocumentLoader:
    """YAML/JSON document loader with caching."""

    def __init__(self, cache_enabled: Optional[bool] = None):
        """Initialize the loader.

        Args:
            cache_enabled: Whether to cache loaded files. If None, uses global config.
        """
        self.cache_enabled = cache_enabled if cache_enabled is not None else spector_config.cache_enabled
        self._cache: Dict[Path, Tuple[Any, SourceMap]] = {}

    def parse(self, content: str, fmt: str = "yaml") -> Any:
        """Decode ``content`` written in ``fmt``. Empty documents decode to ``{}``."""
        if fmt not in FORMATS:
            raise DocumentError(f"Unsupported document format {fmt!r}, expected one of {list(FORMATS)}")

        try:
            data = json.loads(content) if fmt == "json" else yaml.safe_load(content)
        except (ValueError, yaml.YAMLError) as exc:
            raise DocumentError(f"Failed to parse {fmt.upper()} content: {exc}") from exc
        return {} if data is None else data

    def parse_with_source(self, content: str, fmt: str = "yaml") -> Tuple[Any, SourceMap]:
        """Decode ``content`` and return ``(data, source_map)``.

        source_map keys are JSON pointers (e.g. "/servers/0/port"), values hold
        1-based line/column.
        """
        data = self.parse(content, fmt)
        return data, build_source_map(content)

    def load_with_source(self, file_path: Union[str, Path]) -> Tuple[Any, SourceMap]:
        """Load a document file and return ``(data, source_map)``."""
        path = Path(file_path)

        if not path.is_file():
            raise DocumentError(f"Document file not found: {path}")

        if self.cache_enabled and path in self._cache:
            logger.debug("Loading document from cache: %s", path)
            return self._cache[path]

        logger.debug("Loading document file: %s", path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentError(f"Failed to read document file {path}: {exc}") from exc

        try:
            loaded = self.parse_with_source(content, format_for(path))
        except DocumentError as exc:
            raise DocumentError(f"{path}: {exc}") from exc

        if self.cache_enabled:
            self._cache[path] = loaded
        return loaded

    def load(self, file_path: Union[str, Path]) -> Any:
        """Load a document file.

        Raises:
            DocumentError: If the file cannot be read or parsed
        """
        data, _ = self.load_with_source(file_path)
        return data

    def clear_cache(self) -> None:
        self._cache.clear()


# Global loader instance
document_loader = DocumentLoader()


def load_document(path: Union[str, Path]) -> Any:
    """Load a YAML or JSON document from ``path``."""
    return document_loader.load(path)


def parse_document(content: str, fmt: str = "yaml") -> Any:
    """Decode a YAML or JSON document from text."""
    return document_loader.parse(content, fmt)


# -------------------------
# Schema documents
# -------------------------


@dataclass(frozen=True)
class SchemaIssue:
    message: str
    yaml_path: str  # JSON pointer


def _schema_document_json() -> dict:
    if "schema_document" not in _SCHEMA_CACHE:
        schema_path = Path(__file__).parent / "data" / "schema_document.json"
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMA_CACHE["schema_document"] = json.load(f)
    return _SCHEMA_CACHE["schema_document"]


def schema_issues(raw: Any) -> List[SchemaIssue]:
    """Check the shape of a decoded schema document.

    Only the textual spelling is checked here (known attributes, known type
    names); the meta-schema still runs when the document is compiled.
    """
    validator = jsonschema.Draft7Validator(_schema_document_json())
    issues = []
    for error in sorted(validator.iter_errors(raw), key=lambda e: [str(p) for p in e.absolute_path]):
        path = "".join(f"/{p}" for p in error.absolute_path)
        issues.append(SchemaIssue(message=error.message, yaml_path=path))
    return issues


def _compile_document(raw: Any, validators: Validators, origin: str) -> Schema:
    issues = schema_issues(raw)
    if issues:
        details = "\n".join(f"  {issue.yaml_path or '/'}: {issue.message}" for issue in issues)
        raise SchemaError(f"invalid schema document {origin}:\n{details}")
    return validate_schema(raw, validators=validators)


def load_schema(
    source: Union[str, Path],
    fmt: Optional[str] = None,
    validators: Validators = None,
) -> Schema:
    """Load and compile a schema document.

    ``source`` is a path when ``fmt`` is omitted, and schema text written in
    ``fmt`` otherwise.

    Raises:
        DocumentError: If the document cannot be read or decoded
        SchemaError: If the document is not a valid schema
    """
    if fmt is None:
        path = Path(source)
        raw = document_loader.load(path)
        origin = str(path)
    else:
        raw = document_loader.parse(str(source), fmt)
        origin = f"({fmt} text)"
    return _compile_document(raw, validators, origin)


def validate_text(
    data_text: str,
    schema_text: str,
    fmt: str = "yaml",
    validators: Validators = None,
) -> ValidationResult:
    """Validate a data document against a schema document, both given as text."""
    schema = load_schema(schema_text, fmt=fmt, validators=validators)
    return validate(parse_document(data_text, fmt), schema)


def validate_file(
    data_path: Union[str, Path],
    schema: Any,
    validators: Validators = None,
) -> ValidationResult:
    """Validate a data file against ``schema``.

    ``schema`` may be a path to a schema document, a raw schema or a
    compiled :class:`~spector.schema.Schema`.
    """
    if isinstance(schema, (str, Path)):
        schema = load_schema(schema, validators=validators)
    return validate(load_document(data_path), schema, validators=validators)
