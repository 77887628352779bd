import pytest

from angebot.domain.models import Discount, Position, PositionType
from angebot.domain.pricing import compute_totals, line_total, row_values, subtotal_at


def test_worked_example_without_discount(draft):
    totals = compute_totals(draft.positions, 19)
    assert totals.net == pytest.approx(120.0)
    assert subtotal_at(draft.positions, 2) == pytest.approx(100.0)
    assert totals.tax == pytest.approx(22.80)
    assert totals.gross == pytest.approx(142.80)
    assert totals.discount_amount == 0.0
    assert totals.taxable_base == pytest.approx(120.0)


def test_worked_example_with_net_percent_discount(draft):
    discount = Discount(enabled=True, type="percent", base="net", value=10)
    totals = compute_totals(draft.positions, 19, discount)
    assert totals.discount_amount == pytest.approx(12.0)
    assert totals.taxable_base == pytest.approx(108.0)
    assert totals.tax == pytest.approx(20.52)
    assert totals.gross == pytest.approx(128.52)


def test_gross_base_discount_comes_off_gross_then_backs_out_tax(draft):
    discount = Discount(enabled=True, type="amount", base="gross", value=23.8)
    totals = compute_totals(draft.positions, 19, discount)
    assert totals.gross_before_discount == pytest.approx(142.80)
    assert totals.discount_amount == pytest.approx(23.8)
    assert totals.gross == pytest.approx(119.0)
    assert totals.taxable_base == pytest.approx(100.0)
    assert totals.tax == pytest.approx(19.0)


def test_gross_percent_matches_net_percent(draft):
    net = compute_totals(draft.positions, 19, Discount(enabled=True, base="net", value=10))
    gross = compute_totals(draft.positions, 19, Discount(enabled=True, base="gross", value=10))
    assert gross.gross == pytest.approx(net.gross)
    assert gross.discount_amount == pytest.approx(14.28)


def test_amount_discount_is_clamped_to_base(draft):
    totals = compute_totals(draft.positions, 19, Discount(enabled=True, type="amount", value=500))
    assert totals.discount_amount == pytest.approx(120.0)
    assert totals.taxable_base == 0.0
    assert totals.gross == 0.0


@pytest.mark.parametrize(
    "discount",
    [
        Discount(enabled=False, value=10),
        Discount(enabled=True, value=0),
        Discount(enabled=True, value=-5),
        Discount(enabled="false", value=10),
    ],
)
def test_inactive_discount_changes_nothing(draft, discount):
    assert compute_totals(draft.positions, 19, discount) == compute_totals(draft.positions, 19)


def test_tax_rate_is_clamped(draft):
    assert compute_totals(draft.positions, 250).tax == pytest.approx(120.0)
    assert compute_totals(draft.positions, -5).tax == 0.0


def test_row_values_and_line_totals(draft):
    assert row_values(draft.positions) == [None, pytest.approx(100.0), pytest.approx(100.0), pytest.approx(20.0)]
    assert line_total(Position(PositionType.HEADING, "x", 3.0, None, 5.0)) == 0.0


def test_subtotal_only_counts_rows_before_it():
    positions = [
        Position(PositionType.ITEM, "a", 1.0, None, 50.0),
        Position(PositionType.SUBTOTAL, "Zwischensumme"),
        Position(PositionType.ITEM, "b", 2.0, None, 25.0),
        Position(PositionType.SUBTOTAL, "Zwischensumme"),
    ]
    values = row_values(positions)
    assert values[1] == pytest.approx(50.0)
    assert values[3] == pytest.approx(100.0)
    assert compute_totals(positions, 0).net == pytest.approx(100.0)


def test_empty_list_gives_zero():
    totals = compute_totals([], 19)
    assert totals.net == totals.tax == totals.gross == 0.0


def test_documented_example_list():
    positions = [
        Position(PositionType.ITEM, "", 2.0, None, 50.0),
        Position(PositionType.SUBTOTAL, "Zwischensumme"),
        Position(PositionType.ITEM, "", 1.0, None, 20.0),
    ]
    totals = compute_totals(positions, 19, Discount(enabled=False))
    assert totals.net == pytest.approx(120.0)
    assert row_values(positions)[1] == pytest.approx(100.0)
    assert totals.gross == pytest.approx(142.80)
