import pytest

from angebot.domain.models import CatalogItem, Position, PositionType
from angebot.domain.numbers import optional_number, parse_number
from angebot.domain.positions import PositionList
from angebot.errors import ValidationError


def _items(n: int) -> PositionList:
    return PositionList([Position(PositionType.ITEM, f"P{i}", 1.0, "Stk.", float(i)) for i in range(n)])


def test_new_list_starts_with_default_item():
    positions = PositionList.with_default_item()
    assert len(positions) == 1
    assert positions[0] == Position(PositionType.ITEM, "", 1.0, "Stück", 0.0)


@pytest.mark.parametrize(
    "kind,expected",
    [
        (PositionType.HEADING, "Neue Überschrift"),
        (PositionType.SUBTOTAL, "Zwischensumme"),
        (PositionType.DESCRIPTION, ""),
        (PositionType.SEPARATOR, ""),
    ],
)
def test_append_structural_rows_use_defaults(kind, expected):
    positions = PositionList()
    added = positions.append(kind)
    assert added.type is kind
    assert added.description == expected
    assert added.quantity is None and added.unit_price is None
    assert positions[-1] is added


def test_append_unknown_kind_falls_back_to_item():
    positions = PositionList()
    assert positions.append("banana").type is PositionType.ITEM


def test_remove_and_out_of_range():
    positions = _items(3)
    removed = positions.remove(1)
    assert removed.description == "P1"
    assert [p.description for p in positions] == ["P0", "P2"]
    with pytest.raises(IndexError):
        positions.remove(5)


def test_reorder_is_a_permutation():
    positions = _items(5)
    before = positions.snapshot()
    positions.reorder(0, 3)
    assert [p.description for p in positions] == ["P1", "P2", "P3", "P0", "P4"]
    assert sorted(p.description for p in positions) == sorted(p.description for p in before)

    positions.reorder(4, 0)
    assert [p.description for p in positions] == ["P4", "P1", "P2", "P3", "P0"]


def test_reorder_same_index_is_noop():
    positions = _items(3)
    positions.reorder(1, 1)
    assert [p.description for p in positions] == ["P0", "P1", "P2"]


def test_reorder_rejects_invalid_index():
    with pytest.raises(IndexError):
        _items(2).reorder(0, 2)


def test_update_field_coerces_numbers():
    positions = _items(1)
    positions.update_field(0, "unitPrice", "2,5")
    assert positions[0].unit_price == 2.5
    positions.update_field(0, "unitPrice", "abc")
    positions.update_field(0, "quantity", "nan")
    assert positions[0].unit_price == 0.0
    assert positions[0].quantity == 0.0


def test_update_field_clamps_negative_quantity():
    positions = _items(1)
    positions.update_field(0, "quantity", "-3")
    assert positions[0].quantity == 0.0
    positions.update_field(0, "unitPrice", "-3")
    assert positions[0].unit_price == -3.0


def test_update_field_text_and_unknown():
    positions = _items(1)
    positions.update_field(0, "description", "Wand streichen")
    positions.update_field(0, "unit", None)
    assert positions[0].description == "Wand streichen"
    assert positions[0].unit == ""
    with pytest.raises(ValidationError):
        positions.update_field(0, "colour", "rot")


def test_add_catalog_item_with_description():
    positions = PositionList()
    added = positions.add_catalog_item(
        CatalogItem(name="Heizkörper", unit="", unit_price=249.9, description="inkl. Montage")
    )
    assert [p.type for p in added] == [PositionType.ITEM, PositionType.DESCRIPTION]
    assert added[0].unit == "Stk."
    assert added[0].quantity == 1.0
    assert added[1].description == "inkl. Montage"
    assert len(positions) == 2


def test_snapshot_is_detached():
    positions = _items(2)
    snap = positions.snapshot()
    positions.update_field(0, "description", "geändert")
    assert snap[0].description == "P0"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2,5", 2.5),
        ("1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        (" 3 ", 3.0),
        (7, 7.0),
        ("abc", None),
        ("", None),
        (True, None),
        (float("nan"), None),
        ("inf", None),
        (None, None),
        ([1], None),
    ],
)
def test_optional_number(raw, expected):
    assert optional_number(raw) == expected


def test_parse_number_default():
    assert parse_number("abc") == 0.0
    assert parse_number(None, 19.0) == 19.0
