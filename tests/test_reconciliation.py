import pytest

from core.models import InventoryRecord
from core.reconciliation import MatchType, RecordResolver, deduct_stock


class FakeLookup:
    """In-memory stand-in for the store's lookup methods."""

    def __init__(self, records):
        self.records = records
        self.calls = []

    def get_one(self, field, value):
        self.calls.append(("get_one", value))
        return next((r for r in self.records if getattr(r, field) == value), None)

    def find_by_name(self, fragment):
        self.calls.append(("find_by_name", fragment))
        return next(
            (r for r in self.records if fragment.lower() in r.product_name.lower()), None
        )


@pytest.fixture
def records():
    return [
        InventoryRecord(id=1, product_name="Red Saree", sku="RS-1", sellable_stock=10),
        InventoryRecord(id=2, product_name="Red Saree Deluxe", sku="RSD-1", sellable_stock=5),
    ]


def test_sku_match_wins_over_name_match(records):
    resolver = RecordResolver(FakeLookup(records))

    result = resolver.resolve(sku="RSD-1", name="Red Saree")

    assert result.matched_by is MatchType.SKU
    assert result.record.id == 2


def test_blank_sku_falls_back_to_name(records):
    lookup = FakeLookup(records)
    resolver = RecordResolver(lookup)

    result = resolver.resolve(sku="  ", name="saree deluxe")

    assert result.matched_by is MatchType.NAME
    assert result.record.id == 2
    assert lookup.calls == [("find_by_name", "saree deluxe")]


def test_unknown_sku_falls_back_to_name(records):
    result = RecordResolver(FakeLookup(records)).resolve(sku="NOPE", name="Red Saree")

    assert result.matched_by is MatchType.NAME
    assert result.record.id == 1


def test_no_match_reports_none(records):
    result = RecordResolver(FakeLookup(records)).resolve(sku="NOPE", name="Kurta")

    assert result.matched_by is MatchType.NONE
    assert result.record is None
    assert not result.found


def test_blank_sku_and_name_never_query(records):
    lookup = FakeLookup(records)

    result = RecordResolver(lookup).resolve(sku=None, name=None)

    assert not result.found
    assert lookup.calls == []


@pytest.mark.parametrize(
    "current, quantity, expected",
    [
        (12, 3, 9),
        (12, 12, 0),
        (12, 15, 0),
        (0, 1, 0),
    ],
)
def test_deduct_stock_never_goes_negative(current, quantity, expected):
    assert deduct_stock(current, quantity) == expected
