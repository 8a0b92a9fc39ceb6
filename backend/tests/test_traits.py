"""Tests for the style dimensions and dimension balance."""

from stylequiz.core.traits import DIMENSIONS, dimension_balance


def test_dimension_poles_are_distinct():
    poles = list(DIMENSIONS) + [dim["opposite"] for dim in DIMENSIONS.values()]
    assert len(set(poles)) == 2 * len(DIMENSIONS)


def test_dimension_balance_splits_scores():
    balance = {d["trait"]: d for d in dimension_balance({"warm": 3, "cool": 1, "sparkly": 9})}

    assert balance["warm"]["left_percent"] == 75.0
    assert balance["warm"]["dominant"] == "warm"
    assert len(balance) == len(DIMENSIONS)


def test_dimension_balance_keys_by_left_pole_only():
    balance = dimension_balance({"rich": 4})
    assert [d["trait"] for d in balance] == list(DIMENSIONS)
    assert balance[0]["right_score"] == 4
    assert balance[0]["dominant"] == "rich"


def test_dimension_balance_unscored_dimension():
    balance = {d["trait"]: d for d in dimension_balance({})}
    assert balance["bold"]["left_percent"] == 0.0
    assert balance["bold"]["dominant"] == "refined"


def test_dimension_balance_even_split_has_no_dominant_pole():
    balance = {d["trait"]: d for d in dimension_balance({"playful": 2, "serious": 2})}
    assert balance["playful"]["left_percent"] == 50.0
    assert balance["playful"]["dominant"] is None
