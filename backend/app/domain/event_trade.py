"""
Event trade criteria shared by the match workflow and the start-chat endpoint.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from ..core.constants import MAX_CHARACTER_NAME_LENGTH
from ..core.exceptions import ValidationException


@dataclass(frozen=True)
class TradeItem:
    """One (character_name, quantity) row of a give or want list."""

    character_name: str
    quantity: int = 1

    @property
    def is_blank(self) -> bool:
        return not (self.character_name or "").strip()

    def to_dict(self) -> dict:
        return {"character_name": self.character_name, "quantity": self.quantity}


def clean_items(items: Iterable[TradeItem]) -> List[TradeItem]:
    """Drop rows with a blank name and strip the rest."""
    return [
        TradeItem(character_name=item.character_name.strip(), quantity=item.quantity)
        for item in items
        if not item.is_blank
    ]


def validate_criteria(
    give_items: Sequence[TradeItem], want_items: Sequence[TradeItem]
) -> Tuple[List[TradeItem], List[TradeItem]]:
    """
    Clean and validate a give/want pair.

    Both lists need at least one named row, and every named row needs a
    quantity of at least 1.

    Returns:
        The cleaned (give, want) lists

    Raises:
        ValidationException: If either list is empty or a quantity is below 1
    """
    give = clean_items(give_items)
    want = clean_items(want_items)

    missing = [name for name, rows in (("give_items", give), ("want_items", want)) if not rows]
    if missing:
        raise ValidationException(
            "Add at least one item you give and one item you want",
            details={"missing": missing},
        )

    for field, rows in (("give_items", give), ("want_items", want)):
        for item in rows:
            if item.quantity < 1:
                raise ValidationException(
                    "Quantity must be at least 1",
                    details={"field": field, "character_name": item.character_name},
                )
            if len(item.character_name) > MAX_CHARACTER_NAME_LENGTH:
                raise ValidationException(
                    f"Character name must be at most {MAX_CHARACTER_NAME_LENGTH} characters",
                    details={"field": field},
                )
    return give, want


def render_items(items: Iterable[TradeItem]) -> str:
    """Human readable list, e.g. "CharA x1, CharB x2"."""
    return ", ".join(f"{item.character_name} x{item.quantity}" for item in items)
