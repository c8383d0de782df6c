"""Pretty but compact JSON output for sidecar files.

Like `json.dumps(..., indent=2)`, but objects and arrays that fit into
`max_length` characters (including indentation) are kept on one line.
Integral floats are written as integers so values computed as floats do not
show up as ``500.0``.
"""

from __future__ import annotations

import json
import re
from typing import Any

_STRING_OR_CHAR = re.compile(r'("(?:[^\\"]|\\.)*")|[:,]')


def _normalize_numbers(obj: Any) -> Any:
    if isinstance(obj, float) and obj.is_integer():
        return int(obj)
    if isinstance(obj, dict):
        return {key: _normalize_numbers(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_normalize_numbers(value) for value in obj]
    return obj


def _add_spaces(compact: str) -> str:
    return _STRING_OR_CHAR.sub(lambda m: m.group(1) or m.group(0) + " ", compact)


def stringify(obj: Any, indent: int = 2, max_length: int = 80) -> str:
    """Serialize `obj` to pretty-compact JSON."""
    indent_str = " " * indent

    def _stringify(value: Any, current_indent: str, reserved: int) -> str:
        compact = json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        length = max_length - len(current_indent) - reserved
        if len(compact) <= length:
            prettified = _add_spaces(compact)
            if len(prettified) <= length:
                return prettified

        next_indent = current_indent + indent_str
        items: list[str] = []
        if isinstance(value, (list, tuple)):
            start, end = "[", "]"
            for index, item in enumerate(value):
                items.append(_stringify(item, next_indent, 0 if index == len(value) - 1 else 1))
        elif isinstance(value, dict):
            start, end = "{", "}"
            for index, (key, item) in enumerate(value.items()):
                key_part = json.dumps(key, ensure_ascii=False) + ": "
                reserved_len = len(key_part) + (0 if index == len(value) - 1 else 1)
                items.append(key_part + _stringify(item, next_indent, reserved_len))
        else:
            return compact

        if not items:
            return compact
        return ("\n" + current_indent).join(
            [start, indent_str + (",\n" + next_indent).join(items), end]
        )

    return _stringify(_normalize_numbers(obj), "", 0)
