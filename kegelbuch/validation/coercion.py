"""
Permissive Input Coercion

DESIGN DECISION: Numbers typed into the ledger are never rejected.
Anything that cannot be read as a non-negative number becomes zero.
Data entry during a bowling evening must not be interrupted by
validation dialogs; a wrong zero is visible in the totals and easy
to correct, a blocked input field is not.

The helpers follow the reading rules of a browser number field:
leading whitespace is skipped, the longest numeric prefix is used
("12abc" -> 12, "3.7" -> 3 for counts) and a decimal comma is
accepted ("0,5" -> 0.5).

These helpers NEVER raise.
"""

import math
import re
from typing import Any


_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

_SLUG_WHITESPACE = re.compile(r"\s+")
_SLUG_INVALID = re.compile(r"[^a-z0-9_]")


def coerce_count(raw_value: Any) -> int:
    """
    Read a penalty count.
    
    Returns a non-negative integer; 0 for empty, non-numeric
    or negative input.
    """
    if isinstance(raw_value, bool):
        return int(raw_value)
    if isinstance(raw_value, int):
        return max(raw_value, 0)
    if isinstance(raw_value, float):
        if not math.isfinite(raw_value):
            return 0
        return max(int(raw_value), 0)
    if raw_value is None:
        return 0
    
    match = _INT_PREFIX.match(str(raw_value))
    if not match:
        return 0
    return max(int(match.group(1)), 0)


def coerce_amount(raw_value: Any) -> float:
    """
    Read a money amount (entry fee, penalty price).
    
    Returns a non-negative float; 0.0 for empty, non-numeric,
    non-finite or negative input.
    """
    if isinstance(raw_value, bool) or raw_value is None:
        return 0.0
    if isinstance(raw_value, (int, float)):
        value = float(raw_value)
    else:
        text = str(raw_value).replace(",", ".")
        match = _FLOAT_PREFIX.match(text)
        if not match:
            return 0.0
        try:
            value = float(match.group(1))
        except ValueError:
            return 0.0
    
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def slugify_label(label: str) -> str:
    """
    Derive a stable identifier from a display label.
    
    lowercase -> whitespace runs become "_" -> everything outside
    [a-z0-9_] is dropped. The mapping is lossy: "Käse" becomes "kse".
    Collisions are reported by the configuration store.
    """
    slug = _SLUG_WHITESPACE.sub("_", label.strip().lower())
    return _SLUG_INVALID.sub("", slug)
