import pytest

from tailorshop.order_number import FIRST_ORDER_NUMBER, is_valid_order_number, next_order_number


@pytest.mark.parametrize(
    "last, expected",
    [
        ("1A", "2A"),
        ("42C", "43C"),
        ("999A", "1000A"),
        ("1000A", "1B"),
        ("1000M", "1N"),
        ("1000Z", "1A"),
    ],
)
def test_next_order_number(last, expected):
    assert next_order_number(last) == expected


@pytest.mark.parametrize("last", [None, "", "ABC", "0", "12", "12a", "12345A", "A1", "\u0661\u0662A", "１２A"])
def test_malformed_history_restarts_sequence(last):
    assert next_order_number(last) == FIRST_ORDER_NUMBER == "1A"


def test_walk_rolls_letter_after_thousand():
    code = "1A"
    for _ in range(999):
        code = next_order_number(code)
    assert code == "1000A"
    assert next_order_number(code) == "1B"


def test_is_valid_order_number():
    assert is_valid_order_number("1A")
    assert is_valid_order_number("1000Z")
    assert not is_valid_order_number("1a")
    assert not is_valid_order_number("A")
    assert not is_valid_order_number(None)
    assert not is_valid_order_number("\u0661\u0662A")
