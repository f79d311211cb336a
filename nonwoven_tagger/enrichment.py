"""
enrichment.py — Attribute extraction for descriptions and whole sheets.

Each description goes through the four extractors independently:
  GSM     -> gsm.extract_gsm
  WIDTH   -> width.extract_width
  ITEM    -> item.classify_item
  ADD ON  -> profiles.extract_add_ons (full or composite profile)

enrich_dataframe() merges the results into the original rows: description
column first, the remaining original columns, then GSM, WIDTH, ITEM, ADD ON.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from nonwoven_tagger.gsm import extract_gsm
from nonwoven_tagger.item import classify_item
from nonwoven_tagger.normalize import to_text
from nonwoven_tagger.profiles import get_profile
from nonwoven_tagger.width import extract_width


OUTPUT_COLUMNS = {
    "gsm": "GSM",
    "width": "WIDTH",
    "item": "ITEM",
    "add_ons": "ADD ON",
}


@dataclass(frozen=True)
class ExtractionResult:
    gsm: str
    width: str
    item: str
    item_match: str
    add_ons: str

    def as_row(self, columns: dict[str, str] | None = None) -> dict[str, str]:
        cols = columns or OUTPUT_COLUMNS
        return {
            cols["gsm"]: self.gsm,
            cols["width"]: self.width,
            cols["item"]: self.item,
            cols["add_ons"]: self.add_ons,
        }


def extract_attributes(text, profile: str | None = None) -> ExtractionResult:
    """Run all four extractors on one description."""
    desc = to_text(text)
    item = classify_item(desc)
    return ExtractionResult(
        gsm=extract_gsm(desc),
        width=extract_width(desc),
        item=item.category,
        item_match=item.matched_text,
        add_ons=get_profile(profile)(desc),
    )


def output_column_names(rules: dict | None = None) -> dict[str, str]:
    configured = (rules or {}).get("output_columns") or {}
    return {key: str(configured.get(key, default)) for key, default in OUTPUT_COLUMNS.items()}


def enrich_dataframe(
    df: pd.DataFrame,
    desc_col: str,
    profile: str | None = None,
    rules: dict | None = None,
) -> pd.DataFrame:
    """Return a copy of df with the attribute columns appended."""
    columns = output_column_names(rules)
    added = list(columns.values())
    # Resolve the profile once so a bad name fails before any row is touched
    get_profile(profile)

    base_cols = [desc_col] + [c for c in df.columns if c != desc_col and c not in added]
    out = df[base_cols].copy()

    records = [
        extract_attributes(value, profile).as_row(columns)
        for value in df[desc_col].tolist()
    ]
    extracted = pd.DataFrame(records, index=df.index, columns=added)
    for col in added:
        out[col] = extracted[col]
    return out
