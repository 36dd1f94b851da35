"""Text views of the live book, statistics and trades, and a dashboard holding them."""

from __future__ import annotations

import abc
from collections.abc import Sequence
from itertools import zip_longest
from typing import TextIO

from lobsim.listeners import OrderBookView, StatsCollector, TradeBuffer
from lobsim.order import Side

_BOOK_DEPTH = 10
_RECENT_TRADES = 3
_EMPTY_BID = " " * 21


class View(abc.ABC):
    """A panel that renders itself as text."""

    @abc.abstractmethod
    def render(self, out: TextIO) -> int:
        """Write the panel to `out` and return how many lines were written."""

    def on_key(self, key: str) -> None:
        """React to a key press; views ignore keys unless they override this."""


class Dashboard:
    """An ordered collection of views rendered one after another."""

    def __init__(self) -> None:
        self._views: list[View] = []

    def add_view(self, view: View) -> None:
        self._views.append(view)

    def render_all(self, out: TextIO) -> int:
        """Render every view followed by a blank line; return the total line count."""
        total = 0
        for view in self._views:
            total += view.render(out)
            out.write("\n")
            total += 1
        return total


class OrderBookViewRenderer(View):
    """Bids and asks side by side, ten levels deep."""

    def __init__(self, book: OrderBookView) -> None:
        self.book = book

    def render(self, out: TextIO) -> int:
        bids = self.book.top_n(Side.BUY, _BOOK_DEPTH)
        asks = self.book.top_n(Side.SELL, _BOOK_DEPTH)
        out.write("=== Order Book ===\n")
        lines = 1
        for bid, ask in zip_longest(bids, asks):
            row = (
                f"BID {bid.aggregate_qty:6} @ {bid.price:.2f}" if bid is not None else _EMPTY_BID
            )
            if ask is not None:
                row += f"   ASK {ask.aggregate_qty:6} @ {ask.price:.2f}"
            out.write(row + "\n")
            lines += 1
        return lines


class StatsViewRenderer(View):
    """Counters and last level prices from a StatsCollector."""

    def __init__(self, stats: StatsCollector | None) -> None:
        self.stats = stats

    def render(self, out: TextIO) -> int:
        stats = self.stats
        if stats is None:
            return 0
        rows = [
            "=== Stats View ===",
            f"Total Orders: {stats.total_orders}",
            f"Total Fills:  {stats.total_fills}",
            f"Total Cancels: {stats.total_cancels}",
        ]
        bid = stats.last_best_bid()
        if bid is not None:
            rows.append(f"Best Bid:    {bid}")
        ask = stats.last_best_ask()
        if ask is not None:
            rows.append(f"Best Ask:    {ask}")
        rows.append(
            f"Trade Count: {stats.trade_count} | Avg Spread: {stats.average_spread():.2f}"
        )
        out.write("".join(row + "\n" for row in rows))
        return len(rows)


class TradesViewRenderer(View):
    """The most recent trades with the wall time of the tick they happened in."""

    def __init__(self, buffer: TradeBuffer | None, tick_times: Sequence[int]) -> None:
        self.buffer = buffer
        self.tick_times = tick_times

    def render(self, out: TextIO) -> int:
        if self.buffer is None:
            return 0
        trades = self.buffer.snapshot(_RECENT_TRADES)
        if not trades:
            return 0
        out.write(f"=== Trades View (last {len(trades)}) ===\n")
        for trade in trades:
            out.write(f"{trade} Timestamp:{self.tick_times[trade.ts]}\n")
        return 1 + len(trades)