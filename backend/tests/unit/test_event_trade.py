import pytest

from app.core.constants import MAX_CHARACTER_NAME_LENGTH
from app.core.exceptions import ValidationException
from app.domain.event_trade import TradeItem, clean_items, render_items, validate_criteria


def test_clean_items_drops_blank_rows():
    items = [TradeItem(" CharA ", 2), TradeItem("", 1), TradeItem("   ", 5)]

    assert clean_items(items) == [TradeItem("CharA", 2)]


def test_validate_criteria_returns_cleaned_lists():
    give, want = validate_criteria([TradeItem("CharA"), TradeItem(" ")], [TradeItem("CharB", 3)])

    assert give == [TradeItem("CharA", 1)]
    assert want == [TradeItem("CharB", 3)]


@pytest.mark.parametrize(
    "give,want,missing",
    [
        ([], [TradeItem("CharB")], ["give_items"]),
        ([TradeItem("CharA")], [TradeItem("  ")], ["want_items"]),
        ([], [], ["give_items", "want_items"]),
    ],
)
def test_validate_criteria_requires_both_sides(give, want, missing):
    with pytest.raises(ValidationException) as exc_info:
        validate_criteria(give, want)

    assert exc_info.value.details["missing"] == missing


def test_validate_criteria_rejects_zero_quantity():
    with pytest.raises(ValidationException):
        validate_criteria([TradeItem("CharA", 0)], [TradeItem("CharB")])


def test_validate_criteria_rejects_long_names():
    with pytest.raises(ValidationException):
        validate_criteria(
            [TradeItem("x" * (MAX_CHARACTER_NAME_LENGTH + 1))], [TradeItem("CharB")]
        )


def test_render_items():
    assert render_items([TradeItem("CharA", 1), TradeItem("CharB", 2)]) == "CharA x1, CharB x2"
