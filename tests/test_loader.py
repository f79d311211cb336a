import io

import pandas as pd
import pytest

from nonwoven_tagger.loader import (
    find_description_column,
    list_sheets,
    load_rules,
    parse_sheet_selection,
    process_uploaded_file,
    process_workbook,
    suggest_description_column,
    workbook_bytes,
    write_workbook,
)


@pytest.fixture
def rules():
    return load_rules()


@pytest.fixture
def workbook(tmp_path):
    path = tmp_path / "orders.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame({
            "NO": [1, 2],
            "Item Desc ": ["SPUNBOND 80GSM WIDTH 160CM", "PLAIN ROLL"],
        }).to_excel(writer, sheet_name="Fabric", index=False)
        pd.DataFrame({
            "ITEM DESCR": ["SMS 25GSM"],
            "QTY": [5],
        }).to_excel(writer, sheet_name="Other", index=False)
        pd.DataFrame(columns=["PRODUCT DESCRIPTION(EN)", "QTY"]).to_excel(
            writer, sheet_name="Headers", index=False)
    return path


class FakeUpload:
    def __init__(self, name, data):
        self.name = name
        self.size = len(data)
        self._data = data

    def getvalue(self):
        return self._data


def test_load_rules_defaults(rules):
    assert rules["description_columns"] == ["ITEM DESC", "PRODUCT DESCRIPTION(EN)"]
    assert rules["default_profile"] == "full"


def test_list_sheets(workbook, tmp_path):
    assert list_sheets(workbook) == ["Fabric", "Other", "Headers"]
    csv = tmp_path / "export.csv"
    csv.write_text("ITEM DESC\nSMS\n")
    assert list_sheets(csv) == ["export"]


def test_parse_sheet_selection():
    names = ["A", "B", "C"]
    assert parse_sheet_selection("1, 3,x,9,1", names) == ["A", "C"]
    assert parse_sheet_selection("", names) == []


def test_find_description_column(rules):
    df = pd.DataFrame(columns=["NO", " product description(en) "])
    assert find_description_column(df, rules) == " product description(en) "
    assert find_description_column(pd.DataFrame(columns=["NO"]), rules) is None


def test_suggest_description_column(rules):
    df = pd.DataFrame(columns=["ITEM DESCR", "QTY"])
    assert suggest_description_column(df, rules) == "ITEM DESCR"
    assert suggest_description_column(pd.DataFrame(columns=["QTY"]), rules) is None


def test_process_workbook(workbook, rules):
    result = process_workbook(workbook, rules=rules)
    assert list(result.sheets) == ["Fabric", "Headers"]

    fabric = result.sheets["Fabric"]
    assert list(fabric.columns) == ["Item Desc ", "NO", "GSM", "WIDTH", "ITEM", "ADD ON"]
    assert fabric["GSM"].tolist() == ["80", "N/A"]
    assert fabric["WIDTH"].tolist() == ["160.00", "N/A"]
    assert fabric["ITEM"].tolist() == ["SB", "N/A"]

    assert [s["sheet"] for s in result.skipped_sheets] == ["Other"]
    assert "closest header: 'ITEM DESCR'" in result.skipped_sheets[0]["reason"]
    assert any("no rows" in w for w in result.warnings)

    stats = result.summary()
    assert stats["processed"] == 2
    assert stats["skipped"] == 1
    assert stats["rows"] == 2


def test_process_selected_sheets(workbook, rules):
    result = process_workbook(workbook, sheets=["Missing", "Fabric"], profile="composite", rules=rules)
    assert list(result.sheets) == ["Fabric"]
    assert result.skipped_sheets[0]["sheet"] == "Missing"
    assert result.processed_sheets[0]["items_found"] == 1


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        process_workbook(tmp_path / "nope.xlsx")


def test_write_workbook(workbook, rules, tmp_path):
    result = process_workbook(workbook, sheets=["Fabric"], rules=rules)
    target = tmp_path / "output.xlsx"
    write_workbook(result, target)

    back = pd.read_excel(target, sheet_name=None, keep_default_na=False)
    assert list(back) == ["Fabric"]
    assert back["Fabric"]["ITEM"].tolist() == ["SB", "N/A"]
    assert back["Fabric"]["ADD ON"].tolist() == ["-", "-"]


def test_write_empty_result(tmp_path, rules):
    csv = tmp_path / "bad.csv"
    csv.write_text("NO,QTY\n1,2\n")
    result = process_workbook(csv, rules=rules)
    assert result.is_empty
    with pytest.raises(ValueError):
        workbook_bytes(result)


def test_process_uploaded_csv(rules):
    upload = FakeUpload("upload.csv", b"ITEM DESC,QTY\nMELT BLOWN 25GSM WHITE,3\n")
    result = process_uploaded_file(upload, rules=rules)
    df = result.sheets["upload"]
    assert df["ITEM"].tolist() == ["MB"]
    assert df["GSM"].tolist() == ["25"]
    assert df["ADD ON"].tolist() == ["White"]

    data = workbook_bytes(result)
    assert pd.read_excel(io.BytesIO(data), sheet_name=None).keys() == {"upload"}
