# Copyright 2025 ApeCloud, Inc.
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

"""Text YSON writer for the subset of values found in generated configs"""

import json
from typing import Any

from ytoperator.exceptions import ConfigGenerationError


def _dump_string(value: str) -> str:
    # YSON string escaping is compatible with JSON for printable text
    return json.dumps(value, ensure_ascii=False)


def _dump(value: Any, indent: int, level: int) -> str:
    if value is None:
        return "#"
    if isinstance(value, bool):
        return "%true" if value else "%false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return _dump_string(value)
    if isinstance(value, (list, tuple)):
        items = [_dump(item, indent, level + 1) for item in value]
        return _wrap("[", "]", items, indent, level)
    if isinstance(value, dict):
        items = [f"{_dump_key(key)}={_dump(item, indent, level + 1)}" for key, item in sorted(value.items())]
        return _wrap("{", "}", items, indent, level)
    raise ConfigGenerationError(f"Cannot represent {type(value).__name__} in YSON")


def _dump_key(key: str) -> str:
    if key and (key[0].isalpha() or key[0] == "_") and all(c.isalnum() or c in "_-." for c in key):
        return key
    return _dump_string(key)


def _wrap(opening: str, closing: str, items, indent: int, level: int) -> str:
    if not items:
        return opening + closing
    if not indent:
        return opening + ";".join(items) + closing
    inner = " " * (indent * (level + 1))
    outer = " " * (indent * level)
    body = ";\n".join(inner + item for item in items)
    return f"{opening}\n{body};\n{outer}{closing}"


def dumps(value: Any, indent: int = 0) -> str:
    """Serialize a value to text YSON; ``indent=0`` gives a single line"""
    return _dump(value, indent, 0)


def dumps_literal(value: str) -> str:
    """Bare YSON literal when the string allows it, quoted string otherwise"""
    return _dump_key(value)
