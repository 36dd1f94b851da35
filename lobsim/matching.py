"""Matching strategies that plan fills against one side of the book."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field

from lobsim.book_side import BookSideView
from lobsim.order import Order


@dataclass(frozen=True)
class FillOp:
    """One planned execution against a resting order."""

    maker_order_id: int
    quantity: int
    price: float

    def __str__(self) -> str:
        return f"makerOrderId:{self.maker_order_id} Qty:{self.quantity} Price:{self.price:.2f}"


@dataclass
class MatchResult:
    """Outcome of matching one incoming order."""

    filled_qty: int = 0
    all_or_none_failed: bool = False
    fills: list[FillOp] = field(default_factory=list)

    def __str__(self) -> str:
        failed = "true" if self.all_or_none_failed else "false"
        return f"filledQty:{self.filled_qty} allOrNoneFailed:{failed}"


class MatchingStrategy(abc.ABC):
    """Plans how an incoming order trades against the opposite side."""

    @abc.abstractmethod
    def match(self, incoming: Order, opposite: BookSideView) -> MatchResult:
        """Return the fills the incoming order would produce, without touching the book."""


def _price_ok(incoming: Order, level_price: float) -> bool:
    if incoming.market:
        return True
    if incoming.is_buy:
        return incoming.price >= level_price
    return incoming.price <= level_price


class PriceTimePriorityStrategy(MatchingStrategy):
    """Walks prices from best to worse and orders oldest first within a level."""

    def __init__(self, update_incoming: bool = False) -> None:
        self.update_incoming = update_incoming

    def match(self, incoming: Order, opposite: BookSideView) -> MatchResult:
        result = MatchResult()
        if incoming.quantity == 0:
            return result

        if incoming.fok and not self._fully_fillable(incoming, opposite):
            result.all_or_none_failed = True
            return result

        remaining = incoming.quantity
        for level in opposite.levels():
            if remaining == 0 or not _price_ok(incoming, level.price):
                break
            for resting in opposite.orders_at_price(level.price):
                if remaining == 0:
                    break
                executed = min(remaining, resting.quantity)
                if executed == 0:
                    continue
                result.fills.append(FillOp(resting.id, executed, level.price))
                remaining -= executed

        result.filled_qty = incoming.quantity - remaining
        if self.update_incoming:
            incoming.quantity = remaining
        return result

    @staticmethod
    def _fully_fillable(incoming: Order, opposite: BookSideView) -> bool:
        available = 0
        for level in opposite.levels():
            if available >= incoming.quantity or not _price_ok(incoming, level.price):
                break
            for resting in opposite.orders_at_price(level.price):
                if available >= incoming.quantity:
                    break
                available += resting.quantity
        return available >= incoming.quantity