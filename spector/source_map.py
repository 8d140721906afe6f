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

"""Line/column lookup for validation errors in YAML documents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Hashable, Optional, Sequence

import yaml

SourceMap = Dict[str, Dict[str, int]]


@dataclass(frozen=True)
class SourceLocation:
    file_path: Optional[Path] = None
    yaml_path: Optional[str] = None
    line: Optional[int] = None  # 1-based
    column: Optional[int] = None  # 1-based


def _jp_escape(token: str) -> str:
    # "~" -> "~0", "/" -> "~1"
    return token.replace("~", "~0").replace("/", "~1")


def to_pointer(keys_path: Sequence[Hashable]) -> str:
    """Render an error's ``keys_path`` as a JSON pointer ("" is the root)."""
    return "".join(f"/{_jp_escape(str(segment))}" for segment in keys_path)


def build_source_map(content: str) -> SourceMap:
    """Map JSON-pointer paths of a YAML document to 1-based line/column.

    Built from PyYAML's node tree (``yaml.compose``) so the data returned by
    ``safe_load`` keeps its shape. Content that does not compose yields an
    empty map; parse errors are reported by the loader.
    """
    source_map: SourceMap = {}

    try:
        root = yaml.compose(content, Loader=yaml.SafeLoader)
    except yaml.YAMLError:
        return source_map

    if root is None:
        return source_map

    stack = [(root, "")]
    while stack:
        node, path = stack.pop()
        mark = node.start_mark
        source_map[path] = {"line": mark.line + 1, "column": mark.column + 1}

        if isinstance(node, yaml.MappingNode):
            for key_node, value_node in node.value:
                if isinstance(key_node, yaml.ScalarNode):
                    stack.append((value_node, f"{path}/{_jp_escape(key_node.value)}"))
        elif isinstance(node, yaml.SequenceNode):
            for index, item_node in enumerate(node.value):
                stack.append((item_node, f"{path}/{index}"))

    return source_map


def lookup_source(
    source_map: Optional[SourceMap],
    keys_path: Sequence[Hashable],
    file_path: Optional[Path] = None,
) -> SourceLocation:
    """Locate ``keys_path`` in a document.

    Falls back to the closest recorded ancestor, so errors about a missing
    key point at the mapping that should have contained it.
    """
    yaml_path = to_pointer(keys_path)
    if not source_map:
        return SourceLocation(file_path=file_path, yaml_path=yaml_path)

    segments = list(keys_path)
    while True:
        entry = source_map.get(to_pointer(segments))
        if entry is not None:
            return SourceLocation(
                file_path=file_path,
                yaml_path=yaml_path,
                line=entry.get("line"),
                column=entry.get("column"),
            )
        if not segments:
            return SourceLocation(file_path=file_path, yaml_path=yaml_path)
        segments.pop()
