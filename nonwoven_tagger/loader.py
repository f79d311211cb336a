"""
loader.py — Read workbooks, find the description column, write the tagged copy.

Supports .xlsx (openpyxl), .numbers (Apple) and .csv/.tsv files.
Uses config/extraction_rules.yaml for description headers and output columns.

Two entry points:
- process_workbook(): a workbook on disk
- process_uploaded_file(): a Streamlit UploadedFile (for the web app)
"""

from __future__ import annotations

import io
import tempfile
import warnings
from pathlib import Path

import pandas as pd
import yaml
from rapidfuzz import fuzz, process

from nonwoven_tagger.enrichment import enrich_dataframe, output_column_names
from nonwoven_tagger.normalize import NOT_FOUND


# ── Config ─────────────────────────────────────────────────

_RULES_PATH = Path(__file__).resolve().parent.parent / "config" / "extraction_rules.yaml"


def load_rules(path: Path | str | None = None) -> dict:
    cfg_path = Path(path) if path else _RULES_PATH
    with open(cfg_path) as f:
        return yaml.safe_load(f) or {}


# ── Sheet listing and reading ──────────────────────────────

def _read_numbers(filepath: Path, sheet: str | None = None) -> pd.DataFrame:
    from numbers_parser import Document
    doc = Document(str(filepath))
    target = doc.sheets[0]
    if sheet is not None:
        target = next((s for s in doc.sheets if s.name == sheet), None)
        if target is None:
            raise KeyError(f"Sheet not found: {sheet}")
    table = target.tables[0]
    headers = []
    for c in range(table.num_cols):
        val = table.cell(0, c).value
        headers.append(str(val).strip() if val is not None else f"col_{c}")
    rows = []
    for r in range(1, table.num_rows):
        row = [table.cell(r, c).value for c in range(table.num_cols)]
        rows.append(row)
    return pd.DataFrame(rows, columns=headers)


def _numbers_sheet_names(filepath: Path) -> list[str]:
    from numbers_parser import Document
    return [s.name for s in Document(str(filepath)).sheets]


def list_sheets(filepath: Path | str) -> list[str]:
    """Sheet names in workbook order. CSV/TSV files have one sheet named after the file."""
    filepath = Path(filepath)
    ext = filepath.suffix.lower()
    try:
        if ext == ".xlsx":
            with pd.ExcelFile(filepath, engine="openpyxl") as xls:
                return list(xls.sheet_names)
        elif ext == ".numbers":
            return _numbers_sheet_names(filepath)
        elif ext in (".csv", ".tsv"):
            return [filepath.stem]
        else:
            return []
    except Exception as e:
        warnings.warn(f"Could not read {filepath.name}: {e}")
        return []


def read_sheet(filepath: Path | str, sheet: str) -> pd.DataFrame | None:
    filepath = Path(filepath)
    ext = filepath.suffix.lower()
    try:
        if ext == ".xlsx":
            return pd.read_excel(filepath, sheet_name=sheet, engine="openpyxl")
        elif ext == ".numbers":
            return _read_numbers(filepath, sheet)
        elif ext in (".csv", ".tsv"):
            sep = "\t" if ext == ".tsv" else ","
            return pd.read_csv(filepath, sep=sep)
        else:
            return None
    except Exception as e:
        warnings.warn(f"Could not read sheet '{sheet}' from {filepath.name}: {e}")
        return None


def parse_sheet_selection(selection: str, sheet_names: list[str]) -> list[str]:
    """
    Turn a "1,3,5" style answer into sheet names.
    Indexes are 1-based; blanks, non-numbers and out-of-range entries are ignored.
    """
    chosen = []
    for part in str(selection).split(","):
        part = part.strip()
        if not part.isdigit():
            continue
        idx = int(part) - 1
        if 0 <= idx < len(sheet_names) and sheet_names[idx] not in chosen:
            chosen.append(sheet_names[idx])
    return chosen


# ── Description column ─────────────────────────────────────

def _description_headers(rules: dict) -> list[str]:
    return rules.get("description_columns") or ["ITEM DESC", "PRODUCT DESCRIPTION(EN)"]


def find_description_column(df: pd.DataFrame, rules: dict) -> str | None:
    """First header that equals a configured description header (case-insensitive)."""
    wanted = {h.strip().upper() for h in _description_headers(rules)}
    for col in df.columns:
        if isinstance(col, str) and col.strip().upper() in wanted:
            return col
    return None


def suggest_description_column(df: pd.DataFrame, rules: dict) -> str | None:
    """Closest header to the configured names, for the 'column not found' message."""
    headers = [c for c in df.columns if isinstance(c, str) and c.strip()]
    if not headers:
        return None
    min_score = rules.get("suggest_min_score", 70)
    best = None
    for wanted in _description_headers(rules):
        hit = process.extractOne(
            wanted.upper(), headers,
            scorer=fuzz.token_set_ratio,
            processor=lambda s: s.strip().upper(),
        )
        if hit and hit[1] >= min_score and (best is None or hit[1] > best[1]):
            best = hit
    return best[0] if best else None


# ── Public API ─────────────────────────────────────────────

class WorkbookResult:
    """Container for processed sheets plus what was skipped and why."""

    def __init__(self, source: str = ""):
        self.source = source
        self.sheets: dict[str, pd.DataFrame] = {}
        self.warnings: list[str] = []
        self.processed_sheets: list[dict] = []
        self.skipped_sheets: list[dict] = []

    @property
    def is_empty(self) -> bool:
        return not self.sheets

    def summary(self) -> dict:
        return {
            "source": self.source,
            "processed": len(self.processed_sheets),
            "skipped": len(self.skipped_sheets),
            "rows": sum(s["rows"] for s in self.processed_sheets),
        }


def _skip(result: WorkbookResult, sheet: str, reason: str):
    result.skipped_sheets.append({"sheet": sheet, "reason": reason})
    result.warnings.append(f"Skipped sheet '{sheet}': {reason}")


def _process_sheet(sheet: str, df: pd.DataFrame | None, profile: str | None,
                   rules: dict, result: WorkbookResult):
    """Find the description column, extract attributes, store the sheet."""
    if df is None:
        _skip(result, sheet, "Unreadable")
        return
    if len(df.columns) == 0:
        _skip(result, sheet, "Empty sheet")
        return

    desc_col = find_description_column(df, rules)
    if desc_col is None:
        expected = " or ".join(f"'{h}'" for h in _description_headers(rules))
        reason = f"No {expected} column"
        hint = suggest_description_column(df, rules)
        if hint:
            reason += f" (closest header: '{hint}')"
        _skip(result, sheet, reason)
        return

    enriched = enrich_dataframe(df, desc_col, profile=profile, rules=rules)
    result.sheets[sheet] = enriched

    item_col = output_column_names(rules)["item"]
    result.processed_sheets.append({
        "sheet": sheet,
        "description_column": desc_col,
        "rows": len(enriched),
        "items_found": int((enriched[item_col] != NOT_FOUND).sum()) if len(enriched) else 0,
    })
    if enriched.empty:
        result.warnings.append(f"Sheet '{sheet}' has headers but no rows")


def _resolve_sheets(requested: list[str] | None, available: list[str],
                    result: WorkbookResult) -> list[str]:
    if not requested:
        return list(available)
    chosen = []
    for name in requested:
        if name in available:
            chosen.append(name)
        else:
            _skip(result, name, "Sheet not found in workbook")
    return chosen


def process_workbook(
    filepath: Path | str,
    sheets: list[str] | None = None,
    profile: str | None = None,
    rules: dict | None = None,
) -> WorkbookResult:
    """
    Read the selected sheets (all sheets when none are given), tag every row
    and return a WorkbookResult.
    """
    if rules is None:
        rules = load_rules()
    profile = profile or rules.get("default_profile")

    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Input file not found: {filepath}")

    result = WorkbookResult(filepath.name)
    available = list_sheets(filepath)
    if not available:
        result.warnings.append(f"No readable sheets in {filepath.name}")
        return result

    for sheet in _resolve_sheets(sheets, available, result):
        _process_sheet(sheet, read_sheet(filepath, sheet), profile, rules, result)

    return result


def _uploaded_sheets(uploaded_file) -> dict[str, pd.DataFrame | None]:
    """Read every sheet of a Streamlit UploadedFile."""
    name = uploaded_file.name
    ext = Path(name).suffix.lower()
    try:
        if ext == ".xlsx":
            return pd.read_excel(io.BytesIO(uploaded_file.getvalue()), sheet_name=None, engine="openpyxl")
        elif ext == ".numbers":
            # numbers-parser requires a file path, so write to temp file
            with tempfile.NamedTemporaryFile(suffix=".numbers", delete=False) as tmp:
                tmp.write(uploaded_file.getvalue())
                tmp.flush()
                tmp_path = Path(tmp.name)
            try:
                return {sheet: _read_numbers(tmp_path, sheet) for sheet in _numbers_sheet_names(tmp_path)}
            finally:
                tmp_path.unlink(missing_ok=True)
        elif ext in (".csv", ".tsv"):
            sep = "\t" if ext == ".tsv" else ","
            return {Path(name).stem: pd.read_csv(io.BytesIO(uploaded_file.getvalue()), sep=sep)}
        else:
            return {}
    except Exception as e:
        warnings.warn(f"Could not read uploaded file {name}: {e}")
        return {}


def list_uploaded_sheets(uploaded_file) -> list[str]:
    return list(_uploaded_sheets(uploaded_file).keys())


def process_uploaded_file(
    uploaded_file,
    sheets: list[str] | None = None,
    profile: str | None = None,
    rules: dict | None = None,
) -> WorkbookResult:
    """Same as process_workbook() but for an uploaded file."""
    if rules is None:
        rules = load_rules()
    profile = profile or rules.get("default_profile")

    result = WorkbookResult(uploaded_file.name)
    frames = _uploaded_sheets(uploaded_file)
    if not frames:
        result.warnings.append(f"No readable sheets in {uploaded_file.name}")
        return result

    for sheet in _resolve_sheets(sheets, list(frames), result):
        _process_sheet(sheet, frames[sheet], profile, rules, result)

    return result


# ── Output ─────────────────────────────────────────────────

def write_workbook(result: WorkbookResult, target: Path | str | io.BytesIO):
    """Write every processed sheet to an .xlsx file (or buffer), keeping sheet names."""
    if result.is_empty:
        raise ValueError("Nothing to write: no sheet was processed")
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        for sheet, df in result.sheets.items():
            # Excel caps sheet names at 31 characters
            df.to_excel(writer, sheet_name=str(sheet)[:31], index=False)
    return target


def workbook_bytes(result: WorkbookResult) -> bytes:
    buffer = io.BytesIO()
    write_workbook(result, buffer)
    return buffer.getvalue()
