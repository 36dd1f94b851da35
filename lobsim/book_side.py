"""One side of a limit order book: price levels of FIFO order queues."""

from __future__ import annotations

import abc
import dataclasses
import logging
import operator
from collections.abc import Iterator
from dataclasses import dataclass

from sortedcontainers import SortedDict

from lobsim.events import Event, EventListener, EventType
from lobsim.order import Order, Side

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceLevelView:
    """Read-only summary of one price level."""

    price: float
    order_count: int
    aggregate_qty: int

    def __str__(self) -> str:
        return (
            f"Price:{self.price:.2f} order_count:{self.order_count} "
            f"aggregate_qty:{self.aggregate_qty}"
        )


class BookSideView(abc.ABC):
    """What a matching strategy may see of one side of the book."""

    @abc.abstractmethod
    def best_price(self) -> float | None:
        """Best price on this side, or None if the side is empty."""

    @abc.abstractmethod
    def num_levels(self) -> int:
        """Number of price levels."""

    @abc.abstractmethod
    def levels(self) -> Iterator[PriceLevelView]:
        """Price levels from best to worst."""

    @abc.abstractmethod
    def orders_at_price(self, price: float) -> Iterator[Order]:
        """Orders resting at a price, oldest first."""


class OrderBookSide(BookSideView, EventListener):
    """Bids (best is highest) or asks (best is lowest), FIFO within a level."""

    def __init__(self, side: Side) -> None:
        self.side = Side(side)
        self._levels: SortedDict = (
            SortedDict(operator.neg) if self.side is Side.BUY else SortedDict()
        )

    def best_price(self) -> float | None:
        return next(iter(self._levels), None)

    def num_levels(self) -> int:
        return len(self._levels)

    def levels(self) -> Iterator[PriceLevelView]:
        for price, orders in self._levels.items():
            yield PriceLevelView(price, len(orders), sum(o.quantity for o in orders))

    def orders_at_price(self, price: float) -> Iterator[Order]:
        yield from self._levels.get(price, ())

    def add_order(self, order: Order) -> Order:
        """Append a copy of the order to its level and return the stored copy."""
        stored = dataclasses.replace(order)
        self._levels.setdefault(stored.price, []).append(stored)
        return stored

    def get_orders_at_price(self, price: float) -> list[Order]:
        """The live order list at a price, or a fresh empty list if there is no level."""
        return self._levels.get(price, [])

    def remove_price_level(self, price: float) -> None:
        self._levels.pop(price, None)

    def empty_at_price(self, price: float) -> bool:
        return not self._levels.get(price)

    def on_event(self, event: Event) -> None:
        """Observe bus traffic; the book itself is changed only by the engine."""
        payload = event.payload
        if event.type is EventType.ORDER_ADDED:
            if payload.side is self.side:
                log.debug("Listener saw OrderAdded: %s", payload)
        elif event.type is EventType.ORDER_UPDATED:
            log.debug("Listener saw OrderUpdated: %s", payload)
        elif event.type is EventType.ORDER_REMOVED:
            log.debug("Listener saw OrderRemoved: id=%s", payload.id)
        elif event.type is EventType.FILL:
            log.debug("Listener saw Fill: %s", payload)