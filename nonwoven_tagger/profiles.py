"""
profiles.py — ADD-ON profile selection.

"full" is the table-driven tagger (sorted feature + color labels).
"composite" is the simplified color + softness + HI/HO label per color.
Both take a description and return the ADD ON cell value.
"""

from __future__ import annotations

from typing import Callable

from nonwoven_tagger.addons import extract_add_ons as _extract_full
from nonwoven_tagger.composite import extract_composite_add_ons


DEFAULT_PROFILE = "full"

ADD_ON_PROFILES: dict[str, Callable[[object], str]] = {
    "full": _extract_full,
    "composite": extract_composite_add_ons,
}


class UnknownProfileError(KeyError):
    pass


def get_profile(name: str | None = None) -> Callable[[object], str]:
    key = (name or DEFAULT_PROFILE).strip().lower()
    if key not in ADD_ON_PROFILES:
        raise UnknownProfileError(
            f"Unknown ADD ON profile {name!r}. Available: {', '.join(ADD_ON_PROFILES)}"
        )
    return ADD_ON_PROFILES[key]


def extract_add_ons(text, profile: str | None = None) -> str:
    return get_profile(profile)(text)
