import random

import pytest

from ifa_architect.ledger import HoldingLedger, holding_return_pct, parse_amount
from ifa_architect.models import Asset


@pytest.mark.parametrize("raw, expected", [
    ("１，２３４", 1234.0),
    ("1,234,567", 1234567.0),
    ("-", 0.0),
    ("", 0.0),
    ("－５００", -500.0),
    ("12.5", 12.5),
    (300, 300.0),
])
def test_parse_amount_normalizes_user_input(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "1,2x", None, True, "nan", "inf", "-Infinity", "1e400", float("nan")])
def test_parse_amount_rejects_non_numbers(raw):
    assert parse_amount(raw) is None


def test_totals(sample_holdings):
    totals = HoldingLedger.of(sample_holdings).totals()
    assert totals.total_amount == 2_000_000
    assert totals.total_profit_loss == 150_000
    assert totals.invested_base == 1_850_000
    assert totals.return_pct == pytest.approx(150_000 / 1_850_000 * 100)


def test_return_pct_is_zero_when_invested_base_not_positive():
    ledger = HoldingLedger.of([Asset(id="a", name="X", amount=100, profit_loss=100)])
    assert ledger.totals().return_pct == 0.0
    assert holding_return_pct(ledger.assets[0]) == 0.0
    assert HoldingLedger().totals().return_pct == 0.0


def test_add_mints_fresh_id_and_copies():
    original = Asset(id="same", name="Apple", amount=10)
    ledger = HoldingLedger().add(original).add(original)
    assert len(ledger) == 2
    assert len(ledger.ids()) == 2
    assert "same" not in ledger.ids()
    assert all(a.id.startswith("holding-") for a in ledger)
    assert original.id == "same"


def test_update_parses_numeric_fields_and_accepts_aliases(sample_holdings):
    ledger = HoldingLedger.of(sample_holdings)
    updated = ledger.update("h-1", "amount", "２，０００，０００").update("h-1", "profitLoss", "-1,000")
    asset = updated.get("h-1")
    assert asset.amount == 2_000_000
    assert asset.profit_loss == -1000
    # the original ledger is untouched
    assert ledger.get("h-1").amount == 1_200_000


def test_update_keeps_previous_value_on_bad_input(sample_holdings):
    ledger = HoldingLedger.of(sample_holdings)
    assert ledger.update("h-1", "amount", "abc") is ledger
    assert ledger.update("missing", "amount", 5) is ledger
    assert ledger.update("h-1", "nonsense", 5) is ledger
    assert ledger.update("h-1", "id", "other") is ledger


def test_update_text_field(sample_holdings):
    ledger = HoldingLedger.of(sample_holdings).update("h-2", "name", "日本国債")
    assert ledger.get("h-2").name == "日本国債"


def test_remove(sample_holdings):
    ledger = HoldingLedger.of(sample_holdings).remove("h-1")
    assert ledger.ids() == {"h-2"}
    assert HoldingLedger.of(sample_holdings).remove("missing").ids() == {"h-1", "h-2"}


def test_low_confidence_flags():
    ledger = HoldingLedger.of([
        Asset(id="a", name="A", confidence=0.5),
        Asset(id="b", name="B", confidence=0.8),
        Asset(id="c", name="C"),
    ])
    assert [a.id for a in ledger.low_confidence()] == ["a"]


def test_non_finite_input_leaves_totals_intact():
    ledger = HoldingLedger.of([Asset(id="a", name="A", amount=100, profit_loss=10)])
    for raw in ("nan", "inf", "1e400"):
        assert ledger.update("a", "amount", raw) is ledger
        assert ledger.update("a", "profitLoss", raw) is ledger
    assert ledger.totals().total_amount == 100
    assert ledger.totals().invested_base == 90


# raw cell input -> stored amount (None: rejected, previous value kept)
CELL_INPUTS = {
    "1,000": 1000.0,
    "２，５００": 2500.0,
    "-300": -300.0,
    "": 0.0,
    "42.5": 42.5,
    "abc": None,
    "nan": None,
    "inf": None,
}


@pytest.mark.parametrize("seed", range(5))
def test_total_amount_tracks_entries_through_mixed_edits(seed):
    rng = random.Random(seed)
    ledger = HoldingLedger()
    expected = {}

    for _ in range(60):
        op = rng.choice(["add", "update", "update", "remove"])
        ids = sorted(expected)
        if op == "add":
            amount = rng.choice([0, 500, 1_200_000])
            before = ledger.ids()
            ledger = ledger.add(Asset(name="X", amount=amount))
            (new_id,) = ledger.ids() - before
            expected[new_id] = float(amount)
        elif op == "update":
            target = rng.choice(ids) if ids and rng.random() < 0.8 else "missing"
            raw = rng.choice(list(CELL_INPUTS))
            ledger = ledger.update(target, "amount", raw)
            if target in expected and CELL_INPUTS[raw] is not None:
                expected[target] = CELL_INPUTS[raw]
        else:
            target = rng.choice(ids) if ids and rng.random() < 0.7 else "missing"
            ledger = ledger.remove(target)
            expected.pop(target, None)

        assert ledger.ids() == set(expected)
        assert ledger.totals().total_amount == pytest.approx(sum(expected.values()))
