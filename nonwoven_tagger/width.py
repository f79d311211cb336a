"""
width.py — Roll/fabric width extraction, normalized to centimeters.

Two strategies:
1. Keyword-anchored: the description mentions WIDTH or WIDE, so the number
   next to that keyword is the width. Dimensional notation, ranges and dual
   units are resolved here.
2. Fallback scan: no WIDTH/WIDE anywhere, so the first number carrying an
   inch, cm or mm unit is taken (space separated, then concatenated, then
   buried in a longer token).

Every path returns a string with exactly two decimals, e.g. "152.40".
"""

from __future__ import annotations

import re
from decimal import Decimal

from nonwoven_tagger.normalize import NOT_FOUND, NUMBER, fold, format_cm, to_decimal


# ── Units ──────────────────────────────────────────────────
# (unit key, spelled-out forms, symbol forms, factor to centimeters)
# Longer spellings come first so INCHES beats INCH and MM beats M.

UNITS: tuple[tuple[str, str, str | None, Decimal], ...] = (
    ("inch", r"INCHES|INCH", r"''|\"", Decimal("2.54")),
    ("cm",   r"CMS|CM", None, Decimal("1")),
    ("mm",   r"MM", None, Decimal("0.1")),
    ("m",    r"METERS|METRES|METER|METRE|MTRS|MTR|M(?!2)", None, Decimal("100")),
    ("ft",   r"FEET|FOOT|FT", r"'", Decimal("30.48")),
    ("yd",   r"YARDS|YARD|YDS|YD", None, Decimal("91.44")),
)


def _unit_alt(letters: str, symbols: str | None, bounded: bool = True) -> str:
    # Spelled-out units need a right boundary so "2 MAX" is not 2 meters
    parts = [f"(?:{letters})" + ("(?![A-Z])" if bounded else "")]
    if symbols:
        parts.append(symbols)
    return "(?:" + "|".join(parts) + ")"


_UNIT_FULLMATCH = tuple(
    (key, re.compile(_unit_alt(letters, symbols, bounded=False)), factor)
    for key, letters, symbols, factor in UNITS
)

# Any unit, as one alternation (inch symbols before the foot apostrophe)
_ANY_UNIT = "|".join(_unit_alt(letters, symbols) for _, letters, symbols, _ in UNITS)

_WIDTH_KEYWORD = re.compile(r"\bWIDTH\b|\bWIDE\b")


def _factor(unit: str | None) -> Decimal:
    # Anchored forms without a unit are read as centimeters
    if not unit:
        return Decimal("1")
    for _, pattern, factor in _UNIT_FULLMATCH:
        if pattern.fullmatch(unit):
            return factor
    return Decimal("1")


def _to_cm(raw: str, unit: str | None) -> str | None:
    value = to_decimal(raw)
    if value is None:
        return None
    return format_cm(value * _factor(unit))


# ── Keyword-anchored rules ─────────────────────────────────
# Each rule captures the width number in group "num". Units may be captured in
# "unit", "unit2" or "unit3"; the first one present applies. Order is priority.

def _u(name: str) -> str:
    return rf"(?:\s*(?P<{name}>{_ANY_UNIT}))?"


_RANGE_SEP = r"\s*(?:-|~|TO)\s*"

ANCHORED_RULES: tuple[tuple[str, re.Pattern], ...] = (
    ("cut_width", re.compile(
        rf"\bCUT\s+WIDTH\s*[:=]?\s*(?P<num>{NUMBER}){_u('unit')}")),
    ("edge_width", re.compile(
        rf"\bEDGE\s+WIDTH\s*[:=]?\s*(?P<num>{NUMBER}){_u('unit')}")),
    ("width_from", re.compile(
        rf"\bWIDTH\s+FROM\s+(?P<num>{NUMBER}){_u('unit')}"
        rf"(?:{_RANGE_SEP}{NUMBER}{_u('unit2')})?")),
    ("length_x_width", re.compile(
        rf"\b(?:LENGTH|L)\s*[*X]\s*(?:WIDTH|W)\b\s*\)?\s*[:=]?\s*"
        rf"{NUMBER}(?:\s*(?:{_ANY_UNIT}))?\s*[*X]\s*(?P<num>{NUMBER}){_u('unit')}")),
    ("bracketed_range", re.compile(
        rf"\bWIDTH\s*[:=]?\s*[\[(]\s*(?P<num>{NUMBER}){_u('unit')}"
        rf"{_RANGE_SEP}{NUMBER}{_u('unit2')}\s*[\])]{_u('unit3')}")),
    ("width_value", re.compile(
        rf"\bWIDTH\s*(?:[:=]\s*|\s+)(?P<num>{NUMBER}){_u('unit')}"
        rf"(?:{_RANGE_SEP}{NUMBER}{_u('unit2')})?")),
    ("value_wide", re.compile(
        rf"(?<![\d.,])(?P<num>{NUMBER}){_u('unit')}(?:{_RANGE_SEP}{NUMBER}{_u('unit2')})?"
        rf"\s*(?:\([^)]*\)\s*)?WIDE\b")),
)


def _rule_unit(m: re.Match) -> str | None:
    groups = m.groupdict()
    for name in ("unit", "unit2", "unit3"):
        if groups.get(name):
            return groups[name]
    return None


def _match_anchored(desc: str) -> str | None:
    for _name, pattern in ANCHORED_RULES:
        m = pattern.search(desc)
        if m:
            result = _to_cm(m.group("num"), _rule_unit(m))
            if result is not None:
                return result
    return None


# ── Unit scans ─────────────────────────────────────────────

def _build_scans(left: str, gap: str, bounded: bool = True, keys: tuple[str, ...] | None = None):
    scans = []
    for key, letters, symbols, factor in UNITS:
        if keys and key not in keys:
            continue
        alt = _unit_alt(letters, symbols, bounded=bounded)
        scans.append((key, factor, re.compile(rf"{left}(?P<num>{NUMBER}){gap}{alt}")))
    return tuple(scans)


# Anywhere in the text, in unit priority order (inch first)
_ANYWHERE_SCANS = _build_scans(r"(?<![\d.,])", r"\s*")

# Fallback tiers: "60 INCH", then "150CM", then "ROLL150CMX". Meters, feet and
# yards are roll lengths unless a WIDTH/WIDE keyword says otherwise.
_FALLBACK_UNITS = ("inch", "cm", "mm")
_SPACED_SCANS = _build_scans(r"(?<![A-Z\d.,])", r"\s+", keys=_FALLBACK_UNITS)
_JOINED_SCANS = _build_scans(r"(?<![A-Z\d.,])", r"", keys=_FALLBACK_UNITS)
_EMBEDDED_SCANS = _build_scans(r"(?<![\d.,])", r"", bounded=False, keys=_FALLBACK_UNITS)


def _touches_weight_unit(desc: str, m: re.Match) -> bool:
    """True for mm tokens glued to a gram unit, e.g. "30G50MM" or "50MMG"."""
    start = m.start("num")
    before = desc[start - 1] if start > 0 else ""
    after = desc[m.end():m.end() + 1]
    return before == "G" or after == "G"


def _scan(desc: str, scans) -> str | None:
    for key, factor, pattern in scans:
        for m in pattern.finditer(desc):
            if key == "mm" and _touches_weight_unit(desc, m):
                continue
            value = to_decimal(m.group("num"))
            if value is not None:
                return format_cm(value * factor)
    return None


# ── Public API ─────────────────────────────────────────────

def extract_width(text) -> str:
    """Return the width in centimeters ("152.40") or N/A."""
    desc = fold(text)
    if not desc:
        return NOT_FOUND

    if _WIDTH_KEYWORD.search(desc):
        result = _match_anchored(desc) or _scan(desc, _ANYWHERE_SCANS)
        return result or NOT_FOUND

    for scans in (_SPACED_SCANS, _JOINED_SCANS, _EMBEDDED_SCANS):
        result = _scan(desc, scans)
        if result:
            return result
    return NOT_FOUND
