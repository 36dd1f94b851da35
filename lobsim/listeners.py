"""Bus listeners that keep a level-2 book, collect statistics and drive a dashboard."""

from __future__ import annotations

import operator
import sys
import threading
import time
from itertools import islice
from typing import TYPE_CHECKING, TextIO

from sortedcontainers import SortedDict

from lobsim.book_side import PriceLevelView
from lobsim.events import Event, EventListener, EventType, TradeInfo
from lobsim.order import Side
from lobsim.queues import SpscRing

if TYPE_CHECKING:
    from lobsim.views import Dashboard

TradeBuffer = SpscRing[TradeInfo]


class OrderBookView(EventListener):
    """Incremental level-2 snapshot built from LevelAgg events."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bids: SortedDict = SortedDict(operator.neg)
        self._asks: SortedDict = SortedDict()

    def _levels(self, side: Side) -> SortedDict:
        return self._bids if side is Side.BUY else self._asks

    def on_event(self, event: Event) -> None:
        if event.type is not EventType.LEVEL_AGG:
            return
        level = event.payload
        with self._lock:
            levels = self._levels(level.side)
            if level.agg_qty > 0:
                levels[level.px] = level.agg_qty
            else:
                levels.pop(level.px, None)

    def get_qty_at_price(self, side: Side, price: float) -> int | None:
        """Aggregate quantity at a price, or None if there is no such level."""
        with self._lock:
            return self._levels(side).get(price)

    def top_n(self, side: Side, n: int) -> list[PriceLevelView]:
        """The best `n` levels of a side, best first."""
        with self._lock:
            items = islice(self._levels(side).items(), n)
            return [PriceLevelView(price, 0, qty) for price, qty in items]


class StatsCollector(EventListener):
    """Counts orders, fills and cancels and tracks the last seen level prices."""

    def __init__(self, trade_buffer: TradeBuffer | None = None) -> None:
        self.trade_buffer = trade_buffer
        self._lock = threading.Lock()
        self._orders = 0
        self._fills = 0
        self._cancels = 0
        self._best_bid = 0
        self._best_ask = 0

    def on_event(self, event: Event) -> None:
        payload = event.payload
        with self._lock:
            if event.type is EventType.FILL:
                self._fills += 1
                if self.trade_buffer is not None:
                    self.trade_buffer.push(
                        TradeInfo(
                            payload.maker_id,
                            payload.taker_id,
                            payload.px,
                            payload.qty,
                            event.ts,
                            event.seq,
                        )
                    )
            elif event.type is EventType.ORDER_ADDED:
                self._orders += 1
            elif event.type is EventType.ORDER_REMOVED:
                self._cancels += 1
            elif event.type is EventType.LEVEL_AGG:
                # Prices are kept as whole numbers, as in the quantity counters.
                if payload.side is Side.BUY:
                    self._best_bid = int(payload.px)
                else:
                    self._best_ask = int(payload.px)

    @property
    def total_orders(self) -> int:
        with self._lock:
            return self._orders

    @property
    def total_fills(self) -> int:
        with self._lock:
            return self._fills

    @property
    def total_cancels(self) -> int:
        with self._lock:
            return self._cancels

    @property
    def trade_count(self) -> int:
        return self.total_fills

    def last_best_bid(self) -> int | None:
        with self._lock:
            return self._best_bid if self._best_bid > 0 else None

    def last_best_ask(self) -> int | None:
        with self._lock:
            return self._best_ask if self._best_ask > 0 else None

    def average_spread(self) -> float:
        """Last ask minus last bid, or 0.0 until both have been seen."""
        with self._lock:
            if self._best_bid == 0 or self._best_ask == 0:
                return 0.0
            return float(self._best_ask - self._best_bid)


class MarketDataPublisher(EventListener):
    """Redraws a dashboard every `refresh_interval` events."""

    def __init__(
        self,
        dashboard: Dashboard,
        out: TextIO | None = None,
        refresh_interval: int = 10,
        pause: float = 0.5,
    ) -> None:
        if refresh_interval < 1:
            raise ValueError("refresh_interval must be at least 1")
        self.dashboard = dashboard
        self._out = out
        self.refresh_interval = refresh_interval
        self.pause = pause
        self._event_counter = 0
        self.last_frame_lines = 0

    def on_event(self, event: Event) -> None:
        self._event_counter += 1
        if self._event_counter % self.refresh_interval == 0:
            self.refresh()

    def refresh(self) -> int:
        """Render the dashboard once and return how many lines it wrote."""
        out = self._out if self._out is not None else sys.stdout
        self.last_frame_lines = self.dashboard.render_all(out)
        out.flush()
        if self.pause > 0:
            time.sleep(self.pause)
        return self.last_frame_lines