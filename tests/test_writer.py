import csv
import json
from datetime import date

import pandas as pd
import pytest

from order_extractor.models import EXPORT_COLUMNS, ENVELOPE_FIELDS
from order_extractor.writer import (
    append_xlsx,
    build_envelope,
    default_export_name,
    export_rows,
    print_records,
    write_auto,
)

HEADER = [
    "Page", "Date", "Cust Order #", "PO Number", "Customer Name", "Ship To Name",
    "Customer Address", "Ship To Address", "Phone", "Address Type",
    "Model Number", "Internet Num", "Qty Shipped",
]


def test_export_column_order():
    assert list(EXPORT_COLUMNS) == HEADER


def test_export_rows(sample_orders):
    rows = export_rows(sample_orders)
    assert list(rows[0]) == HEADER
    assert rows[0]["Cust Order #"] == "W123456789"
    assert rows[0]["Ship To Name"] == "John Doe"
    assert rows[1]["Cust Order #"] == "ORDER-2"
    assert rows[1]["Qty Shipped"] == "1"


def test_build_envelope(sample_orders):
    envelope = build_envelope(sample_orders)
    assert list(envelope) == ["orders"]
    assert list(envelope["orders"][0]) == ENVELOPE_FIELDS
    assert envelope["orders"][0]["page"] == 1
    assert envelope["orders"][1]["date"] == ""
    assert "description" not in envelope["orders"][0]


def test_write_csv_via_auto(tmp_path, sample_orders):
    out = tmp_path / "orders.csv"
    write_auto(export_rows(sample_orders), str(out))

    with open(out, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        header = next(reader)
        body = list(reader)
    assert header == HEADER
    assert len(body) == 2
    assert body[0][2] == "W123456789"


def test_write_json_via_auto(tmp_path, sample_orders):
    out = tmp_path / "orders.json"
    write_auto(build_envelope(sample_orders), str(out))
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data["orders"]) == 2


def test_write_xlsx_via_auto(tmp_path, sample_orders):
    out = tmp_path / "orders.xlsx"
    write_auto(export_rows(sample_orders), str(out))
    df = pd.read_excel(out, dtype=str)
    assert list(df.columns) == HEADER
    assert df.loc[0, "Customer Name"] == "Jane Smith"


def test_write_auto_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        write_auto([], str(tmp_path / "orders.txt"))
    with pytest.raises(ValueError):
        write_auto({"orders": []}, str(tmp_path / "orders.csv"))


def test_append_xlsx_writes_header_once(tmp_path, sample_orders):
    book = tmp_path / "orders.xlsx"

    assert append_xlsx(sample_orders, str(book)) == 2
    assert append_xlsx(sample_orders[:1], str(book)) == 1

    df = pd.read_excel(book, sheet_name="IMPORT", header=None, dtype=object)
    assert list(df.iloc[0]) == HEADER
    assert len(df) == 4
    assert (df[0] == "Page").sum() == 1
    assert df.iloc[3, 2] == "W123456789"


def test_append_xlsx_adds_header_when_missing(tmp_path, sample_orders):
    book = tmp_path / "orders.xlsx"
    pd.DataFrame([["old", "row"]]).to_excel(book, sheet_name="IMPORT", header=False, index=False)

    append_xlsx(sample_orders[:1], str(book))

    df = pd.read_excel(book, sheet_name="IMPORT", header=None, dtype=object)
    assert df.iloc[0, 0] == "old"
    assert df.iloc[1, 0] == "Page"
    assert df.iloc[2, 2] == "W123456789"


def test_append_xlsx_keeps_other_sheets(tmp_path, sample_orders):
    book = tmp_path / "orders.xlsx"
    pd.DataFrame({"a": [1]}).to_excel(book, sheet_name="Summary", index=False)

    append_xlsx(sample_orders, str(book))

    sheets = pd.read_excel(book, sheet_name=None)
    assert set(sheets) == {"Summary", "IMPORT"}


def test_default_export_name():
    assert default_export_name(date(2025, 10, 14)) == "home_depot_orders_2025-10-14.csv"


def test_empty_csv_gets_order_header(tmp_path):
    out = tmp_path / "empty.csv"
    write_auto([], str(out))
    assert out.read_text(encoding="utf-8").splitlines() == [",".join(HEADER)]


def test_print_records(capsys):
    rows = [{"page": 1, "index": 0, "text": "Page: 1"}, {"page": 1, "index": 1, "text": "Qty"}]
    print_records(rows, jsonl=True)
    lines = capsys.readouterr().out.splitlines()
    assert [json.loads(l)["index"] for l in lines] == [0, 1]

    print_records({"orders": []})
    assert json.loads(capsys.readouterr().out) == {"orders": []}
