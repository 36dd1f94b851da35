"""Order book engine: matches incoming orders, rests the remainder, publishes events."""

from __future__ import annotations

import logging
import time
from array import array

from lobsim.book_side import OrderBookSide
from lobsim.events import EventBus, Fill, LevelAgg, OrderAdded, OrderRemoved, Payload
from lobsim.matching import FillOp, MatchingStrategy, PriceTimePriorityStrategy
from lobsim.order import Order, Side

log = logging.getLogger(__name__)

MAX_TICKS = 1_000_000
_U32_MASK = 0xFFFFFFFF


def _wall_time() -> int:
    """Milliseconds of the monotonic clock, truncated to 32 bits."""
    return int(time.monotonic() * 1000) & _U32_MASK


class OrderBookEngine:
    """Single-writer limit order book with pluggable matching."""

    MAX_TICKS = MAX_TICKS

    def __init__(self, bus: EventBus, strategy: MatchingStrategy | None = None) -> None:
        self._bus = bus
        self._strategy = strategy if strategy is not None else PriceTimePriorityStrategy()
        self._bids = OrderBookSide(Side.BUY)
        self._asks = OrderBookSide(Side.SELL)
        self._current_tick = 0
        self._next_seq = 0
        self._tick_times = array("I", bytes(4 * MAX_TICKS))
        self._id_lookup: dict[int, tuple[Side, float, Order]] = {}
        bus.add_listener(self._bids.on_event)
        bus.add_listener(self._asks.on_event)

    @property
    def bids(self) -> OrderBookSide:
        """The bid side of the book."""
        return self._bids

    @property
    def asks(self) -> OrderBookSide:
        """The ask side of the book."""
        return self._asks

    def tick_wall_times(self) -> memoryview:
        """Read-only view of the wall-clock time recorded for each logical tick."""
        return memoryview(self._tick_times).toreadonly()

    def add_order(self, order: Order) -> None:
        """Match an order against the book; rest any remainder unless IOC or FOK.

        The order's quantity is reduced to what was left unfilled.
        """
        self._advance_tick()
        self._add_order_to_side(self._book(order.side), order)

    def cancel_order(self, order_id: int) -> None:
        """Remove a resting order; unknown ids are ignored."""
        entry = self._id_lookup.pop(order_id, None)
        if entry is None:
            return
        side, price, stored = entry
        self._cancel_on_side(self._book(side), price, stored)

    def _book(self, side: Side) -> OrderBookSide:
        return self._bids if side is Side.BUY else self._asks

    def _advance_tick(self) -> None:
        if self._current_tick >= MAX_TICKS - 1:
            self._current_tick = 0
        self._current_tick += 1
        self._tick_times[self._current_tick] = _wall_time()
        self._next_seq = 0

    def _emit(self, payload: Payload) -> None:
        self._bus.emit(self._current_tick, self._next_seq, payload)
        self._next_seq += 1

    @staticmethod
    def _aggregate(book_side: OrderBookSide, price: float) -> int:
        return sum(o.quantity for o in book_side.orders_at_price(price))

    def _add_order_to_side(self, book_side: OrderBookSide, incoming: Order) -> None:
        log.debug("Adding %s", incoming)
        opposite = self._asks if incoming.is_buy else self._bids
        result = self._strategy.match(incoming, opposite)
        log.debug("%s", result)

        for fill in result.fills:
            self._emit(Fill(fill.maker_order_id, incoming.id, fill.price, fill.quantity))

        self._apply_fill_ops(result.fills)

        incoming.quantity = max(0, incoming.quantity - result.filled_qty)
        log.debug("After applying fills, incoming qty=%d", incoming.quantity)

        if incoming.quantity > 0 and not (incoming.ioc or incoming.fok):
            stored = book_side.add_order(incoming)
            self._id_lookup[incoming.id] = (incoming.side, incoming.price, stored)
            log.debug("Added to book side %s", incoming)
            self._emit(OrderAdded(incoming.id, incoming.side, incoming.price, incoming.quantity))
            self._emit(
                LevelAgg(incoming.side, incoming.price, self._aggregate(book_side, incoming.price))
            )
        elif incoming.quantity > 0:
            log.debug("Canceled (IOC/FOK) %s", incoming)

    def _apply_fill_ops(self, fills: list[FillOp]) -> None:
        for fill in fills:
            log.debug("Applying %s", fill)
            entry = self._id_lookup.get(fill.maker_order_id)
            if entry is None:
                log.debug("Maker order not found (id=%d)", fill.maker_order_id)
                continue
            side, price, stored = entry
            book_side = self._book(side)
            stored.quantity = max(0, stored.quantity - fill.quantity)
            log.debug("Order ID=%d new qty=%d", fill.maker_order_id, stored.quantity)

            if stored.quantity == 0:
                log.debug("Order ID=%d fully filled, removing from book", fill.maker_order_id)
                self._cancel_on_side(book_side, price, stored)
                del self._id_lookup[fill.maker_order_id]
            self._emit(LevelAgg(side, price, self._aggregate(book_side, price)))

    def _cancel_on_side(self, book_side: OrderBookSide, price: float, stored: Order) -> None:
        orders = book_side.get_orders_at_price(price)
        if not orders:
            return
        for position, resting in enumerate(orders):
            if resting is stored:
                del orders[position]
                break
        if book_side.empty_at_price(price):
            book_side.remove_price_level(price)
        self._emit(OrderRemoved(stored.id))