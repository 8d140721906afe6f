#!/usr/bin/env python3
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

"""CLI entry point for validating YAML/JSON documents against a schema."""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .config import spector_config
from .exceptions import DocumentError, SchemaError
from .loaders import DocumentLoader, load_schema
from .report import FORMATTERS, ValidationReport
from .schema import Schema
from .validation import validate

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_BAD_SCHEMA = 2


def parse_validator(spec: str) -> Dict[str, Callable]:
    """Resolve ``NAME=module:function`` into ``{NAME: function}``."""
    name, sep, target = spec.partition("=")
    module_name, colon, attr = target.partition(":")
    if not sep or not colon or not name or not module_name or not attr:
        raise argparse.ArgumentTypeError(f"expected NAME=module:function, got: {spec!r}")
    try:
        function = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise argparse.ArgumentTypeError(f"cannot import validator {target!r}: {exc}") from None
    if not callable(function):
        raise argparse.ArgumentTypeError(f"validator {target!r} is not callable")
    return {name: function}


def validate_documents(paths: List[Path], schema: Schema, loader: DocumentLoader) -> List[ValidationReport]:
    """Validate every document in ``paths`` against ``schema``."""
    reports = []
    for path in paths:
        report = ValidationReport(path)
        try:
            data, source_map = loader.load_with_source(path)
        except DocumentError as exc:
            report.add_error(str(exc))
        else:
            result = validate(data, schema)
            if not result.ok:
                report.add_validation_error(result.error, source_map)
            else:
                logger.debug("%s is valid", path)
        reports.append(report)
    return reports


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the validator CLI."""
    parser = argparse.ArgumentParser(
        prog='spector',
        description='Validate YAML/JSON documents against a spector schema',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'paths',
        nargs='+',
        type=Path,
        help='Documents to validate',
    )
    parser.add_argument(
        '--schema',
        required=True,
        type=Path,
        help='Schema document (YAML or JSON)',
    )
    parser.add_argument(
        '--format',
        choices=sorted(FORMATTERS),
        default='human',
        help='Output format (default: human)',
    )
    parser.add_argument(
        '--validator',
        action='append',
        default=[],
        type=parse_validator,
        metavar='NAME=module:function',
        help='Register a custom validator usable as {custom: NAME} (repeatable)',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging',
    )

    args = parser.parse_args(argv)
    spector_config.set_logging(verbose=args.verbose)

    validators: Dict[str, Callable] = {}
    for entry in args.validator:
        validators.update(entry)

    try:
        schema = load_schema(args.schema, validators=validators)
    except (DocumentError, SchemaError) as exc:
        print(f"{args.schema}: {exc}", file=sys.stderr)
        sys.exit(EXIT_BAD_SCHEMA)

    loader = DocumentLoader(cache_enabled=False)
    reports = validate_documents(args.paths, schema, loader)

    output = FORMATTERS[args.format](reports)
    if output:
        print(output)

    if any(not report.ok for report in reports):
        sys.exit(EXIT_INVALID)
    if args.format == 'human':
        print(f"Validated {len(reports)} document(s) with no errors.")
    sys.exit(EXIT_OK)


if __name__ == '__main__':
    main()
