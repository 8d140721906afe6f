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

"""Per-document reports for the command line interface."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError
from .source_map import SourceMap, lookup_source


class ValidationReport:
    """Container for the validation outcome of a single document."""

    def __init__(self, file_path: Path):
        """Initialize the report.

        Args:
            file_path: Path to the validated document
        """
        self.file_path = file_path
        self.errors: List[Dict[str, Any]] = []

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        yaml_path: Optional[str] = None,
    ):
        """Add an error message.

        Args:
            message: Error message
            line: Optional line number where the error occurred
            column: Optional column number where the error occurred
            yaml_path: Optional JSON pointer of the offending value
        """
        error = {'message': message}
        if line is not None:
            error['line'] = line
        if column is not None:
            error['column'] = column
        if yaml_path is not None:
            error['yaml_path'] = yaml_path
        self.errors.append(error)

    def add_validation_error(self, error: ValidationError, source_map: Optional[SourceMap] = None):
        """Add a :class:`ValidationError`, located through ``source_map``."""
        location = lookup_source(source_map, error.keys_path)
        self.add_error(
            str(error),
            line=location.line,
            column=location.column,
            yaml_path=location.yaml_path,
        )


def format_human(reports: List[ValidationReport]) -> str:
    lines = []
    for report in reports:
        if report.ok:
            continue
        lines.append(f"{report.file_path}:")
        for error in report.errors:
            line_info = f":{error['line']}" if 'line' in error else ""
            lines.append(f"  ERROR{line_info}: {error['message']}")
    return "\n".join(lines)


def format_json(reports: List[ValidationReport]) -> str:
    output = {
        'files': len(reports),
        'errors': sum(len(r.errors) for r in reports),
        'results': [
            {
                'file': str(r.file_path),
                'valid': r.ok,
                'errors': r.errors,
            }
            for r in reports
        ],
    }
    return json.dumps(output, indent=2)


def format_github_actions(reports: List[ValidationReport]) -> str:
    lines = []
    for report in reports:
        for error in report.errors:
            # Workflow commands are single-line.
            message = error['message'].replace("\n", "%0A")
            lines.append(f"::error file={report.file_path},line={error.get('line', 1)}::{message}")
    return "\n".join(lines)


FORMATTERS = {
    'human': format_human,
    'json': format_json,
    'github-actions': format_github_actions,
}
