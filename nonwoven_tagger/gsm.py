"""
gsm.py — Areal weight (grams per square meter) extraction.

Patterns are ordered from most to least specific. The first one that matches
wins, so "80 G/M2, 15G CORE" reads as 80.
"""

from __future__ import annotations

import re

from nonwoven_tagger.normalize import NOT_FOUND, NUMBER, decimal_string, fold


GSM_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(rf'({NUMBER})\s*G/M2'),
    re.compile(rf'({NUMBER})\s*GSM'),
    re.compile(rf'({NUMBER})\s*GR/M2'),
    re.compile(rf'\b(?:WEIGHT|AVERAGE WEIGHT|BASIS WEIGHT)\s*:?\s*({NUMBER})\s*G\b'),
    re.compile(rf'({NUMBER})\s*G\s+(?:KIMLON|TYPE)'),
    # Bare "15G" / "20 G", but not the start of GSM, G/M2, GR/M2 or a word;
    # words starting with E, M or R (EACH, MELTBLOWN, ROLL) may follow
    re.compile(rf'\b({NUMBER})\s*G\b(?!\s*SM)(?!\s*/M2)(?!\s*R/M2)(?!\s*[A-DF-LN-QS-Z])'),
    re.compile(rf'({NUMBER})\s*GR/YD'),
)


def extract_gsm(text) -> str:
    """Return the weight as a decimal string, e.g. "80" or "12.5", or N/A."""
    desc = fold(text)
    if not desc:
        return NOT_FOUND
    for pattern in GSM_PATTERNS:
        m = pattern.search(desc)
        if m:
            return decimal_string(m.group(1))
    return NOT_FOUND
