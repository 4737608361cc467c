import csv
import io

import pytest

from python_medref.csv_bridge import export_csv, import_csv, import_csv_file
from python_medref.errors import ParseError, ValidationError


def test_export_header_and_order():
    rows = [{"id": "1", "data": {"Route": "Oral", "Category": "Antibiotic", "Extra": "x"}}]
    text = export_csv(["Category", "Dose", "Route"], rows)
    lines = text.splitlines()
    assert lines[0] == "Category,Dose,Route"
    assert lines[1] == "Antibiotic,,Oral"


def test_export_quotes_delimiters_and_newlines():
    rows = [{"id": "1", "data": {"Indications": 'Pain, fever\nand "aches"'}}]
    text = export_csv(["Indications"], rows)
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed == [["Indications"], ['Pain, fever\nand "aches"']]


def test_export_no_rows_is_header_only():
    assert export_csv(["A", "B"], []).splitlines() == ["A,B"]


def test_import_basic():
    columns, rows = import_csv("Category,Generic Name\nAntibiotic,Amoxicillin\nAnalgesic,Paracetamol\n")
    assert columns == ["Category", "Generic Name"]
    assert [r["data"] for r in rows] == [
        {"Category": "Antibiotic", "Generic Name": "Amoxicillin"},
        {"Category": "Analgesic", "Generic Name": "Paracetamol"},
    ]


def test_import_generates_fresh_unique_ids():
    _, rows = import_csv("id,Name\n1,a\n1,b\n")
    ids = [r["id"] for r in rows]
    assert len(set(ids)) == 2
    assert "1" not in ids


def test_import_trims_and_drops_placeholder_headers():
    text = " Category ,Unnamed: 1,,Dose\nAntibiotic,junk,more junk,500mg\n"
    columns, rows = import_csv(text)
    assert columns == ["Category", "Dose"]
    assert rows[0]["data"] == {"Category": "Antibiotic", "Dose": "500mg"}


def test_import_strips_bom_and_skips_empty_lines():
    text = "\ufeffCategory,Dose\r\n\r\nAntibiotic,1g\r\n,\r\n"
    columns, rows = import_csv(text)
    assert columns == ["Category", "Dose"]
    assert [r["data"] for r in rows] == [
        {"Category": "Antibiotic", "Dose": "1g"},
        {"Category": "", "Dose": ""},
    ]


def test_round_trip_keeps_blank_rows_and_whitespace_values():
    rows = [
        {"id": "1", "data": {"A": "x", "B": "y"}},
        {"id": "2", "data": {"A": "", "B": ""}},
        {"id": "3", "data": {"A": " ", "B": ""}},
    ]
    _, imported = import_csv(export_csv(["A", "B"], rows))
    assert [r["data"] for r in imported] == [r["data"] for r in rows]


def test_round_trip_single_blank_column():
    _, imported = import_csv(export_csv(["A"], [{"id": "1", "data": {"A": ""}}]))
    assert [r["data"] for r in imported] == [{"A": ""}]


def test_import_short_row_fills_empty_strings():
    columns, rows = import_csv("A,B,C\n1\n")
    assert rows[0]["data"] == {"A": "1", "B": "", "C": ""}


def test_import_too_many_fields_reports_row():
    with pytest.raises(ParseError) as exc:
        import_csv("A,B\n1,2\n3,4,5\n")
    assert exc.value.row == 2
    assert "(row 2)" in str(exc.value)
    assert "Too many fields" in str(exc.value)


def test_import_unterminated_quote_is_parse_error():
    with pytest.raises(ParseError) as exc:
        import_csv('A,B\n"open,2\n')
    assert exc.value.row == 1
    assert str(exc.value).startswith("CSV parse error:")


def test_import_empty_text_needs_header():
    with pytest.raises(ValidationError, match="header row"):
        import_csv("")


def test_import_only_placeholder_headers():
    with pytest.raises(ValidationError, match="header row"):
        import_csv("Unnamed: 0,,  \n1,2,3\n")


def test_import_duplicate_header():
    with pytest.raises(ValidationError, match='Duplicate column name: "dose"'):
        import_csv("Dose,dose\n1,2\n")


def test_round_trip(sample_rows):
    columns = ["Category", "Generic Name", "Dose", "Route"]
    sample_rows[0]["data"]["Dose"] = '500mg, "twice" daily\nwith food'
    new_columns, new_rows = import_csv(export_csv(columns, sample_rows))
    assert new_columns == columns
    assert [r["data"] for r in new_rows] == [r["data"] for r in sample_rows]


def test_import_csv_file(tmp_path):
    path = tmp_path / "meds.csv"
    path.write_text("Category,Route\nAntibiotic,Oral\n", encoding="utf-8")
    columns, rows = import_csv_file(str(path))
    assert columns == ["Category", "Route"]
    assert rows[0]["data"]["Route"] == "Oral"
