"""Allowed character set for imported names, departments and teams."""

from __future__ import annotations

import re
from typing import Iterable

from .records import EmployeeRecord

# ASCII letters, digits, space and this punctuation only ("@" and the like are rejected).
ASCII_PUNCTUATION = "-_.,()/&'+:;!?#%*[]"

_ALLOWED_RANGES = (
    "\u4e00-\u9faf"  # CJK ideographs
    "\u3040-\u309f"  # hiragana
    "\u30a0-\u30ff"  # katakana
    "\uff01-\uff9f"  # full-width forms, half-width katakana
    "\u3000\u301c"  # ideographic space, wave dash
    "\u2010-\u2015"  # dashes
    "\u2018-\u201f"  # quotes
    "\u2026\u2030\u203b\u2212"  # … ‰ ※ −
    "\u2500-\u257f"  # box drawing
    "\u3005"  # 々
)
ALLOWED_CHAR_RE = re.compile(
    "[" + _ALLOWED_RANGES + "A-Za-z0-9 " + re.escape(ASCII_PUNCTUATION) + "]"
)

CHECKED_FIELDS = ("name", "department", "team")


def find_invalid_chars(value: str) -> list[str]:
    """Disallowed characters in order of first appearance, without repeats."""

    seen: list[str] = []
    for ch in value or "":
        if not ALLOWED_CHAR_RE.fullmatch(ch) and ch not in seen:
            seen.append(ch)
    return seen


def validate_records(records: Iterable[EmployeeRecord]) -> list[dict]:
    errors: list[dict] = []
    for row, rec in enumerate(records, start=1):
        for field_name in CHECKED_FIELDS:
            value = getattr(rec, field_name)
            invalid = find_invalid_chars(value)
            if invalid:
                errors.append(
                    {
                        "row": row,
                        "empNo": rec.emp_no,
                        "field": field_name,
                        "value": value,
                        "invalid_chars": invalid,
                    }
                )
    return errors
