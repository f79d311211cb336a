"""
item.py — Nonwoven construction class (ITEM column).

Checked as a priority chain; the first class that matches is returned:
AT → SMS → SB → MB → Nonwoven. SB is only reachable when the description has
no S/M layer code at all, so a single description never lands in two classes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from nonwoven_tagger.normalize import NOT_FOUND, fold


ITEM_CATEGORIES = ("AT", "SMS", "SB", "MB", "Nonwoven")


@dataclass(frozen=True)
class ItemMatch:
    category: str
    matched_text: str = ""

    @property
    def found(self) -> bool:
        return self.category != NOT_FOUND


_AT = re.compile(r'\bAIR\s*THRU(?:\s*NONWOVEN)?\b|\bAIR\s*THROUGH\b|\bAIRTHRU\b')

# S/M layer codes: SM, SMS, SMMS, SSMMMS ... (starts with S, has an M)
_SM_RUN = re.compile(r'\bS[SM]*M[SM]*\b')
_SMS_WORD = re.compile(r'\bSMS\b')
_SMS_PHRASES = (
    re.compile(r'\bSMS\sNON-WOVEN\sFABRIC\b'),
    re.compile(r'\bSMS\sNONWOVEN\b'),
    re.compile(r'\bSPUNMELT\s\(SMS\)'),
)

_SB_RUN = re.compile(r'\bS(?:SSSBS|S{2,})\b')
_SB_KEYWORD = re.compile(r'\b(?:SPUNBOND|3S|HO\sSSS)\b')

_MB = re.compile(r'\bMELTBLOWN\b|\bMELT\sBLOWN\b')

_NONWOVEN = re.compile(r'NON-WOVEN(?:\sFABRIC)?|NON\sWOVEN(?:\sFABRIC)?|NONWOVEN(?:\sFABRIC)?')


def _has_sm_layers(desc: str) -> bool:
    return bool(_SM_RUN.search(desc) or _SMS_WORD.search(desc))


def _classify_sms(desc: str) -> ItemMatch | None:
    m = _SM_RUN.search(desc)
    if m:
        if any(p.search(desc) for p in _SMS_PHRASES):
            return ItemMatch("SMS", "SMS")
        return ItemMatch("SMS", m.group(0))
    if _SMS_WORD.search(desc):
        return ItemMatch("SMS", "SMS")
    return None


def _classify_sb(desc: str) -> ItemMatch | None:
    if _has_sm_layers(desc):
        return None
    m = _SB_RUN.search(desc) or _SB_KEYWORD.search(desc)
    if m:
        return ItemMatch("SB", m.group(0))
    return None


def classify_item(text) -> ItemMatch:
    """Return the construction class and the substring that decided it."""
    desc = fold(text)
    if not desc:
        return ItemMatch(NOT_FOUND)

    m = _AT.search(desc)
    if m:
        return ItemMatch("AT", m.group(0))

    for classify in (_classify_sms, _classify_sb):
        result = classify(desc)
        if result:
            return result

    m = _MB.search(desc)
    if m:
        return ItemMatch("MB", m.group(0))

    m = _NONWOVEN.search(desc)
    if m:
        return ItemMatch("Nonwoven", m.group(0))

    return ItemMatch(NOT_FOUND)
