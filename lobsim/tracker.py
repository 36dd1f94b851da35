"""Live tracking of generated orders with a three-column text summary."""

from __future__ import annotations

import dataclasses
import math
import sys
import threading
import time
from itertools import zip_longest
from typing import TextIO

from lobsim.order import Order

BUFFER_SIZE = 8192
COLUMN_WIDTH = 34
TOP_FEEDERS = 5
CLEAR_SCREEN = "\033[2J\033[H"
CURSOR_HOME = "\033[H"
_SEPARATOR = " | "
_RULE = "-" * 48


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _feeder_line(feeder_id: int, value: int) -> str:
    return f"Feeder {feeder_id:<3}: {value:<10}"


class OrderTracker:
    """Keeps the latest copy of each order, by id, while enabled."""

    def __init__(self, out: TextIO | None = None, pause: float = 0.18) -> None:
        self._out = out
        self.pause = pause
        self._lock = threading.Lock()
        self._orders: dict[int, Order] = {}
        self._feeders: dict[int, int] = {}
        self._updated = False
        self._enabled = False

    def _stream(self, out: TextIO | None = None) -> TextIO:
        if out is not None:
            return out
        return self._out if self._out is not None else sys.stdout

    def enable(self, on: bool) -> None:
        """Turn tracking on (clearing the screen) or off (forgetting every order)."""
        if on:
            self._stream().write(CLEAR_SCREEN)
        with self._lock:
            self._enabled = on
            if not on:
                self._orders.clear()
                self._feeders.clear()
                self._updated = False

    def is_enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def add_order(self, order: Order, feeder_id: int | None = None) -> None:
        """Store or replace an order, optionally noting which feeder produced it."""
        with self._lock:
            if not self._enabled:
                return
            self._orders[order.id] = dataclasses.replace(order)
            if feeder_id is not None:
                self._feeders[order.id] = feeder_id & 0xFFFF
            self._updated = True

    def update_order(self, order: Order) -> None:
        """Replace an order that is already tracked; unknown ids are ignored."""
        with self._lock:
            if not self._enabled or order.id not in self._orders:
                return
            self._orders[order.id] = dataclasses.replace(order)
            self._updated = True

    def remove_order(self, order_id: int) -> None:
        """Forget an order; unknown ids are ignored."""
        with self._lock:
            if not self._enabled:
                return
            if self._orders.pop(order_id, None) is not None:
                self._feeders.pop(order_id, None)
                self._updated = True

    def snapshot(self) -> list[Order]:
        """Copies of every tracked order."""
        with self._lock:
            return [dataclasses.replace(order) for order in self._orders.values()]

    def has_updates(self) -> bool:
        """Whether anything changed since the last call; resets the flag."""
        with self._lock:
            updated = self._updated
            self._updated = False
            return updated

    def build_side_by_side_view(self) -> str:
        """Order summary, top feeders by volume and by count, and the flow imbalance."""
        with self._lock:
            orders = list(self._orders.items())
            feeders = dict(self._feeders)

        buy_count = sell_count = 0
        buy_qty = sell_qty = 0
        volumes: dict[int, int] = {}
        counts: dict[int, int] = {}
        for order_id, order in orders:
            if order.is_buy:
                buy_count += 1
                buy_qty += order.quantity
            else:
                sell_count += 1
                sell_qty += order.quantity
            feeder = feeders.get(order_id)
            if feeder is not None:
                volumes[feeder] = volumes.get(feeder, 0) + order.quantity
                counts[feeder] = counts.get(feeder, 0) + 1

        by_volume = sorted(volumes.items(), key=lambda item: item[1], reverse=True)
        by_count = sorted(counts.items(), key=lambda item: item[1], reverse=True)

        summary = [
            "=== Order Summary ===",
            f"{'Side':<10} {'Count':<10} {'TotalQty':<10}",
            "",
            f"{'BUY':<10} {buy_count:<10} {buy_qty:<10}",
            f"{'SELL':<10} {sell_count:<10} {sell_qty:<10}",
        ]
        top_volume = [
            "=== Top Feeders ===",
            "Feeder : Qty",
            "",
            *(_feeder_line(fid, qty) for fid, qty in by_volume[:TOP_FEEDERS]),
        ]
        top_count = [
            "=== Orders by Feeder ===",
            "Feeder : Count",
            "",
            *(_feeder_line(fid, n) for fid, n in by_count[:TOP_FEEDERS]),
        ]

        rows = [
            _SEPARATOR.join(cell.ljust(COLUMN_WIDTH) for cell in row) + "\n"
            for row in zip_longest(summary, top_volume, top_count, fillvalue="")
        ]

        total = buy_qty + sell_qty
        imbalance = (buy_qty - sell_qty) / total * 100.0 if total > 0 else 0.0
        rows.append(_RULE + "\n")
        rows.append("=== Order Flow Imbalance ===       | Imbalance: ")
        rows.append(f"{_round_half_away(imbalance)}%\n\n")
        return "".join(rows)[:BUFFER_SIZE]

    def render_live_view(self, out: TextIO | None = None) -> str:
        """Draw the view and return the cursor home; return what was written."""
        with self._lock:
            if not self._orders:
                return ""
        stream = self._stream(out)
        text = self.build_side_by_side_view() + CURSOR_HOME
        stream.write(text)
        stream.flush()
        if self.pause > 0:
            time.sleep(self.pause)
        return text