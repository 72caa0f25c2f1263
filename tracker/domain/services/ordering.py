"""Fractional ordering engine for Kanban columns.

Tickets within a status column are ordered by a real-valued key. A
reposition only rewrites the moved ticket:

- Empty column: 0
- Head: min(existing) - 1
- After T, before U: (T + U) / 2
- After T at the tail: T + 1

Repeated midpoint insertion consumes decimal precision. When any key
carries more than PRECISION_DIGITS decimal digits the whole board is
renormalized to consecutive integers in current sort order. Renormalization
is a pure function over a snapshot: it never changes relative order.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

DEFAULT_PRECISION_DIGITS = 4


class PlacementKind(Enum):
    HEAD = "head"
    TAIL = "tail"
    AFTER = "after"


@dataclass(frozen=True)
class Placement:
    """Where a ticket should land in its destination column.

    Attributes:
        kind: HEAD, TAIL or AFTER.
        after_id: Ticket to land directly after (AFTER only).
    """

    kind: PlacementKind
    after_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind is PlacementKind.AFTER and not self.after_id:
            raise ValueError("AFTER placement requires after_id")
        if self.kind is not PlacementKind.AFTER and self.after_id is not None:
            raise ValueError(f"{self.kind.value} placement does not take after_id")

    @classmethod
    def head(cls) -> Placement:
        return cls(PlacementKind.HEAD)

    @classmethod
    def tail(cls) -> Placement:
        return cls(PlacementKind.TAIL)

    @classmethod
    def after(cls, ticket_id: str) -> Placement:
        return cls(PlacementKind.AFTER, ticket_id)


@dataclass(frozen=True)
class OrderedItem:
    """A (ticket id, order key) pair in a column snapshot."""

    id: str
    order: float


def sort_column(items: Iterable[OrderedItem]) -> list[OrderedItem]:
    """Sort a column by order, breaking ties by id for determinism."""
    return sorted(items, key=lambda item: (item.order, item.id))


def order_for_placement(
    column: Sequence[OrderedItem],
    placement: Placement,
) -> float:
    """Compute the order key for a ticket dropped into a column.

    The moving ticket must already be excluded from ``column``.

    Args:
        column: Snapshot of the destination column (any order).
        placement: Where the ticket should land.

    Returns:
        The new order key.

    Raises:
        KeyError: If an AFTER placement names a ticket not in the column.
    """
    ordered = sort_column(column)
    if placement.kind is not PlacementKind.AFTER:
        if not ordered:
            return 0.0
        if placement.kind is PlacementKind.HEAD:
            return ordered[0].order - 1
        return ordered[-1].order + 1

    for index, item in enumerate(ordered):
        if item.id == placement.after_id:
            if index + 1 < len(ordered):
                return midpoint(item.order, ordered[index + 1].order)
            return item.order + 1
    raise KeyError(placement.after_id)


def midpoint(lower: float, upper: float) -> float:
    """Arithmetic midpoint of two adjacent keys."""
    return (lower + upper) / 2


def decimal_digits(order: float) -> int:
    """Number of decimal digits a key uses (0 for integral values)."""
    if not math.isfinite(order):
        raise ValueError(f"order must be finite, got {order}")
    exponent = Decimal(repr(order)).normalize().as_tuple().exponent
    return max(0, -int(exponent))


def exceeds_precision(
    order: float, digits: int = DEFAULT_PRECISION_DIGITS
) -> bool:
    """True when a key has consumed more than ``digits`` decimal digits."""
    return decimal_digits(order) > digits


def needs_renormalization(
    board: Mapping[str, Iterable[OrderedItem]],
    digits: int = DEFAULT_PRECISION_DIGITS,
) -> bool:
    """True when any key on the board exceeds the precision threshold."""
    return any(
        exceeds_precision(item.order, digits)
        for column in board.values()
        for item in column
    )


def renormalize(
    board: Mapping[str, Iterable[OrderedItem]],
) -> dict[str, float]:
    """Reassign consecutive integer keys to every column of a board.

    Each column is sorted by (order, id) and given 0, 1, 2, ... in that
    order. Relative order within every column is preserved exactly.

    Args:
        board: Column name to the column's items.

    Returns:
        Ticket id to new order, only for tickets whose key changes.
    """
    changes: dict[str, float] = {}
    for column in board.values():
        for position, item in enumerate(sort_column(column)):
            new_order = float(position)
            if item.order != new_order:
                changes[item.id] = new_order
    return changes
