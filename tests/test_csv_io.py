import pytest

from core.csv_io import import_csv, read_inventory_csv, records_to_csv, row_to_fields
from core.errors import StoreError

HEADER = (
    "product_name,local_name,sku,sellable_stock,unusable_stock,hold_stock,"
    "design,color,reorder_level,supplier"
)


def test_export_uses_fixed_column_order_and_quotes_text(add_record, store):
    add_record(
        product_name="Red Saree", local_name="Lal Saree", sku="RS-1", sellable_stock=12,
        unusable_stock=1, hold_stock=2, design="Silk", color="Red", supplier="Weaver, Co",
    )

    lines = records_to_csv(store.list()).splitlines()

    assert lines[0] == ",".join(f'"{c}"' for c in HEADER.split(","))
    assert lines[1] == '"Red Saree","Lal Saree","RS-1",12,1,2,"Silk","Red",5,"Weaver, Co"'


def test_export_of_empty_store_is_header_only(store):
    assert records_to_csv([]).strip().splitlines() == [",".join(f'"{c}"' for c in HEADER.split(","))]


def test_bad_numbers_fall_back_to_defaults():
    fields = row_to_fields(
        {
            "product_name": " Blue  Kurta ",
            "sku": " BK-1 ",
            "sellable_stock": "abc",
            "unusable_stock": "-3",
            "hold_stock": "",
            "reorder_level": "lots",
        }
    )

    assert fields.product_name == "Blue Kurta"
    assert fields.sku == "BK-1"
    assert (fields.sellable_stock, fields.unusable_stock, fields.hold_stock) == (0, 0, 0)
    assert fields.reorder_level == 5


def test_read_aligns_columns_regardless_of_order():
    text = 'SKU,Product Name,Sellable Stock,Extra\n"RS-1","Red Saree",4,ignored\n'

    df = read_inventory_csv(text)

    assert list(df.columns)[:3] == ["product_name", "local_name", "sku"]
    row = df.iloc[0]
    assert (row["sku"], row["product_name"], row["sellable_stock"], row["design"]) == (
        "RS-1", "Red Saree", "4", "",
    )


def test_import_inserts_each_row(store):
    text = (
        HEADER
        + '\n"Red Saree","","RS-1",12,0,1,"Silk","Red",3,"Weaver Co"'
        + '\n"Blue Kurta","","BK-1","n/a",0,0,"Cotton","Blue","",""\n'
    )

    result = import_csv(store, text)

    assert (result.created, result.failed) == (2, 0)
    records = {r.sku: r for r in store.list()}
    assert records["RS-1"].sellable_stock == 12
    assert records["RS-1"].reorder_level == 3
    assert records["BK-1"].sellable_stock == 0
    assert records["BK-1"].reorder_level == 5
    invalid = [i for i in result.quality_report.issues if i.issue_type == "invalid_number"]
    assert [i.column for i in invalid] == ["sellable_stock"]


def test_import_flags_duplicate_skus(store):
    text = HEADER + '\n"A","","DUP",1,0,0,"","",5,""\n"B","","DUP",1,0,0,"","",5,""\n'

    result = import_csv(store, text)

    duplicates = [i for i in result.quality_report.issues if i.issue_type == "duplicate"]
    assert len(duplicates) == 1
    assert duplicates[0].sample_values == ["DUP"]
    assert result.created == 2


def test_import_keeps_going_after_failed_insert(store, monkeypatch):
    real_insert = store.insert

    def flaky_insert(fields):
        if fields.sku == "BAD":
            raise StoreError("constraint failed")
        return real_insert(fields)

    monkeypatch.setattr(store, "insert", flaky_insert)
    text = HEADER + '\n"A","","BAD",1,0,0,"","",5,""\n"B","","OK",1,0,0,"","",5,""\n'

    result = import_csv(store, text)

    assert (result.created, result.failed) == (1, 1)
    assert [r.sku for r in store.list()] == ["OK"]


@pytest.mark.parametrize("text", ["", "   \n"])
def test_import_of_empty_file_creates_nothing(store, text):
    result = import_csv(store, text)

    assert (result.created, result.failed) == (0, 0)
    assert result.quality_report.total_rows == 0


def test_import_accepts_camel_case_headers(store):
    text = (
        "productName,localName,sku,sellableStock,unusableStock,holdStock,"
        "design,color,reorderLevel,supplier\n"
        '"Red Saree","Lal","RS-1",12,1,2,"Silk","Red",7,"Weaver"\n'
    )

    result = import_csv(store, text)

    assert (result.created, result.failed) == (1, 0)
    [record] = store.list()
    assert (record.product_name, record.local_name, record.sku) == ("Red Saree", "Lal", "RS-1")
    assert (record.sellable_stock, record.unusable_stock, record.hold_stock) == (12, 1, 2)
    assert record.reorder_level == 7


def test_unknown_headers_with_full_column_count_map_by_position(store):
    text = (
        "Name,Local,Code,Sellable,Damaged,Held,Style,Colour,Reorder,Vendor\n"
        '"Red Saree","Lal","RS-1",12,1,2,"Silk","Red",7,"Weaver"\n'
    )

    result = import_csv(store, text)

    assert result.created == 1
    [record] = store.list()
    assert (record.product_name, record.sku, record.supplier) == ("Red Saree", "RS-1", "Weaver")
    assert (record.sellable_stock, record.reorder_level) == (12, 7)


def test_file_missing_columns_is_rejected(store):
    text = 'sku,product_name,sellable_stock\n"RS-1","Red Saree",4\n'

    result = import_csv(store, text)

    assert (result.created, result.failed) == (0, 1)
    assert store.list() == []
    [issue] = [i for i in result.quality_report.issues if i.issue_type == "missing_column"]
    assert issue.severity == "critical"
    assert "reorder_level" in issue.column
    assert result.quality_report.has_critical_issues
