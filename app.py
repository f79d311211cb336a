"""
Nonwoven Tagger — GSM / WIDTH / ITEM / ADD ON extraction for product workbooks.

Run with:  streamlit run app.py
"""

from pathlib import Path

import pandas as pd
import streamlit as st
import yaml

from nonwoven_tagger.enrichment import extract_attributes, output_column_names
from nonwoven_tagger.loader import (
    WorkbookResult,
    list_uploaded_sheets,
    process_uploaded_file,
    workbook_bytes,
)
from nonwoven_tagger.profiles import ADD_ON_PROFILES


# ── Config ─────────────────────────────────────────────────

RULES_PATH = Path(__file__).parent / "config" / "extraction_rules.yaml"

PROFILE_HELP = {
    "full": "Every coating, finish, property and color as a sorted list",
    "composite": "One label per color with softness and HI/HO, e.g. BLACK SOFT HO",
}


@st.cache_data
def cached_load_rules():
    with open(RULES_PATH) as f:
        return yaml.safe_load(f)


# ── Result rendering ───────────────────────────────────────

def show_result(result: WorkbookResult, rules: dict):
    """Per-sheet preview, warnings and the download button."""
    stats = result.summary()
    c1, c2, c3 = st.columns(3)
    c1.metric("Sheets processed", stats["processed"])
    c2.metric("Sheets skipped", stats["skipped"])
    c3.metric("Rows", f"{stats['rows']:,}")

    if result.warnings:
        with st.expander("Warnings & Skipped Sheets", expanded=result.is_empty):
            for w in result.warnings:
                st.warning(w)

    if result.is_empty:
        st.info("No sheet could be processed.")
        return

    cols = output_column_names(rules)
    for info in result.processed_sheets:
        sheet = info["sheet"]
        df = result.sheets[sheet]
        with st.expander(f"**{sheet}** -- {info['rows']:,} rows | description: {info['description_column']}"):
            if not df.empty:
                counts = df[cols["item"]].value_counts()
                st.caption(" | ".join(f"{k}: {v:,}" for k, v in counts.items()))
            st.dataframe(df.head(200), use_container_width=True, hide_index=True)

    st.download_button(
        "Download tagged workbook",
        data=workbook_bytes(result),
        file_name=rules.get("output_filename", "output.xlsx"),
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        use_container_width=True,
    )


# ── Page setup ─────────────────────────────────────────────

st.set_page_config(page_title="Nonwoven Tagger", page_icon="N", layout="wide")

rules = cached_load_rules()
profiles = list(ADD_ON_PROFILES)
default_profile = rules.get("default_profile", "full")


# ── Sidebar ────────────────────────────────────────────────

with st.sidebar:
    st.title("Nonwoven Tagger")

    uploaded = st.file_uploader(
        "Drop a workbook here",
        type=[ext.lstrip(".") for ext in rules.get("supported_extensions", [".xlsx"])],
        help="The sheet needs an 'ITEM DESC' or 'PRODUCT DESCRIPTION(EN)' column",
    )

    profile = st.radio(
        "ADD ON profile",
        options=profiles,
        index=profiles.index(default_profile) if default_profile in profiles else 0,
        format_func=lambda p: p.title(),
        help="\n".join(f"- **{k}**: {v}" for k, v in PROFILE_HELP.items()),
    )

    selected_sheets: list[str] = []
    if uploaded:
        # Build a key from filename + size to detect a new upload
        upload_key = (uploaded.name, uploaded.size)
        if st.session_state.get("_upload_key") != upload_key:
            st.session_state._upload_key = upload_key
            st.session_state.sheet_names = list_uploaded_sheets(uploaded)
            st.session_state.pop("result", None)

        sheet_names = st.session_state.get("sheet_names", [])
        if sheet_names:
            selected_sheets = st.multiselect("Sheets to process", options=sheet_names, default=sheet_names[:1])
        else:
            st.error(f"Could not read any sheet from {uploaded.name}")

    run = st.button("Process", use_container_width=True, type="primary",
                    disabled=not (uploaded and selected_sheets))


# ── Main content ───────────────────────────────────────────

workbook_tab, tester_tab = st.tabs(["Workbook", "Try a Description"])

with workbook_tab:
    if run:
        with st.spinner("Extracting attributes..."):
            st.session_state.result = process_uploaded_file(
                uploaded, sheets=selected_sheets, profile=profile, rules=rules,
            )

    if "result" in st.session_state:
        show_result(st.session_state.result, rules)
    else:
        st.markdown(
            """
            ### How to use

            1. **Upload a workbook** (.xlsx, .numbers or .csv) in the sidebar
            2. **Pick the sheets** to process and the ADD ON profile
            3. Click **Process**, check the preview, then **Download** the tagged workbook

            Every row gets four new columns:
            - **GSM**: weight in g/m2, e.g. `80`
            - **WIDTH**: width in cm with two decimals, e.g. `152.40`
            - **ITEM**: AT, SMS, SB, MB or Nonwoven
            - **ADD ON**: coatings, finishes, properties and colors, e.g. `Embossed; Hydrophilic; White`

            Values that cannot be found show as `N/A` (ADD ON shows `-`).
            """
        )

with tester_tab:
    text = st.text_input(
        "Description",
        placeholder='e.g. "SMS NONWOVEN FABRIC 25GSM WIDTH 160CM WHITE HYDROPHILIC"',
        label_visibility="collapsed",
    )
    if text:
        res = extract_attributes(text, profile)
        cols = output_column_names(rules)
        c1, c2, c3 = st.columns(3)
        c1.metric(cols["gsm"], res.gsm)
        c2.metric(cols["width"], res.width)
        c3.metric(cols["item"], res.item, help=f"Matched: {res.item_match}" if res.item_match else None)
        st.markdown(f"**{cols['add_ons']}:** {res.add_ons}")
        st.dataframe(pd.DataFrame([res.as_row(cols)]), use_container_width=True, hide_index=True)
