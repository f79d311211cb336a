"""
composite.py — Simplified ADD-ON profile.

One label per detected color with the softness and hydrophilic/hydrophobic
markers appended, e.g. "WHITE SOFT HI; BLACK SOFT HI". This is a different
contract from the full tagger in addons.py: labels are not sorted and colors
are never suppressed.
"""

from __future__ import annotations

import re

from nonwoven_tagger.normalize import NO_ADD_ONS, fold


# (output name, pattern) in reporting order
COMPOSITE_COLORS: tuple[tuple[str, re.Pattern], ...] = tuple(
    (name, re.compile(pattern)) for name, pattern in (
        ("WHITE", r'\bWHITE\b'),
        ("BLACK", r'\bBLACK\b'),
        ("BLUE", r'\bBLUE\b'),
        ("GREEN", r'\bGREEN\b|\bGRN\b'),
        ("PINK", r'\bPINK\b'),
        ("GRAY", r'\bGR[AE]Y\b'),
        ("BEIGE", r'\bBEIGE\b'),
        ("CREAM", r'\bCREAM\b'),
        ("TURQUOISE", r'\bTURQUOISE\b'),
        ("CHARCOAL", r'\bCHARCOAL\b'),
        ("PURPLE", r'\bPURPLE\b'),
        ("ORANGE", r'\bORANGE\b'),
        ("YELLOW", r'\bYELLOW\b'),
        ("RED", r'\bRED\b'),
        ("BROWN", r'\bBROWN\b'),
    )
)

SOFTNESS_MARKERS: tuple[tuple[str, re.Pattern], ...] = (
    ("SUPER SOFT", re.compile(r'\bSUPER\sSOFT\b')),
    ("EXTRA SOFT", re.compile(r'\bEXTRA\sSOFT\b')),
    ("ULTRA SOFT", re.compile(r'\bULTRA\sSOFT\b')),
    ("SOFT", re.compile(r'\bSOFT\b')),
)

_HYDROPHILIC = re.compile(r'\bHYDROPHILIC\b|\bHI\b')
_HYDROPHOBIC = re.compile(r'\bHYDROPHOBIC\b|\bHO\b')


def _first(markers, desc: str) -> str | None:
    for name, pattern in markers:
        if pattern.search(desc):
            return name
    return None


def _wetting_marker(desc: str) -> str | None:
    if _HYDROPHILIC.search(desc):
        return "HI"
    if _HYDROPHOBIC.search(desc):
        return "HO"
    return None


def composite_labels(text) -> list[str]:
    desc = fold(text)
    if not desc:
        return []
    suffix = [m for m in (_first(SOFTNESS_MARKERS, desc), _wetting_marker(desc)) if m]
    colors = [name for name, pattern in COMPOSITE_COLORS if pattern.search(desc)]
    if not colors:
        return [" ".join(suffix)] if suffix else []
    return [" ".join([color] + suffix) for color in colors]


def extract_composite_add_ons(text) -> str:
    labels = composite_labels(text)
    if not labels:
        return NO_ADD_ONS
    return "; ".join(labels)
