from decimal import Decimal

import pytest

from groupsplit.services.codes import CODE_ALPHABET, generate_group_code
from groupsplit.services.errors import ValidationError
from groupsplit.utils.parse import normalize_code, parse_amount, parse_names, split_args


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12", Decimal("12.00")),
        ("12.5", Decimal("12.50")),
        ("12,50", Decimal("12.50")),
        (" 1 000.25 ", Decimal("1000.25")),
        (7, Decimal("7.00")),
        (Decimal("0.01"), Decimal("0.01")),
    ],
)
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


@pytest.mark.parametrize("value", ["", "0", "0.00", "-1", "1.001", "ten", "NaN", "10000000000", True, Decimal("Infinity")])
def test_parse_amount_rejects(value):
    with pytest.raises(ValidationError):
        parse_amount(value)


def test_split_args():
    assert split_args("/addexpense Alice | 30 | Dinner | all", "addexpense") == ["Alice", "30", "Dinner", "all"]
    assert split_args("/addp@GroupSplitBot Bob", "addp") == ["Bob"]
    assert split_args("/addp", "addp") == []
    assert split_args(None, "addp") == []


def test_parse_names():
    assert parse_names("Alice, Bob ,, Carol") == ["Alice", "Bob", "Carol"]
    assert parse_names("  ") == []


def test_normalize_code():
    assert normalize_code(" AbC12xyz ") == "abc12xyz"
    assert normalize_code("group_abc12xyz") == "abc12xyz"
    assert normalize_code("ab") is None
    assert normalize_code("abc-123") is None


def test_generate_group_code():
    codes = {generate_group_code(8) for _ in range(50)}

    assert all(len(code) == 8 and set(code) <= set(CODE_ALPHABET) for code in codes)
    assert len(codes) > 1
    assert normalize_code(next(iter(codes))) is not None
    with pytest.raises(ValueError):
        generate_group_code(3)
