from __future__ import annotations

import random
import re
import time

# "2025/2026" -> second year is the admission year
_RANGE_RE = re.compile(r"(\d{4})\s*/\s*(\d{4})")
_YEAR_RE = re.compile(r"(\d{4})")

PROVISIONAL_MARK = "P"


def build_year_key(admission_year: str, prefix: str = "UCAES") -> str:
    return f"{prefix}{admission_year}"


def format_application_id(year_key: str, number: int, width: int = 4) -> str:
    """
    '{year_key}{number zero-padded to width}'. Numbers wider than `width`
    are kept whole: 10000 -> 'UCAES202610000'.
    """
    if not year_key:
        raise ValueError("year_key must be non-empty")
    if number < 1:
        raise ValueError(f"sequence number must be positive, got {number}")
    return f"{year_key}{number:0{width}d}"


def provisional_application_id(year_key: str) -> str:
    """
    Non-sequential fallback: '{year_key}P{epoch millis}{4 random digits}'.
    The 'P' never occurs in a sequential ID, which makes these easy to find.
    """
    millis = int(time.time() * 1000)
    suffix = random.randint(0, 9999)
    return f"{year_key}{PROVISIONAL_MARK}{millis}{suffix:04d}"


def admission_year_from_range(text: str | None) -> str | None:
    """'2025/2026' (also '2025/2026 Academic Year') -> '2026'."""
    if not text:
        return None
    m = _RANGE_RE.search(text)
    return m.group(2) if m else None


def first_year(text: str | None) -> str | None:
    """First 4-digit run: '2025' -> '2025', 'AY-2026' -> '2026'."""
    if not text:
        return None
    m = _YEAR_RE.search(str(text))
    return m.group(1) if m else None
