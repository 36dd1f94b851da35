"""Market feeder: a background thread that pushes random orders into a queue."""

from __future__ import annotations

import threading
import time

from lobsim.order import Order, Side
from lobsim.queues import ThreadSafeQueue
from lobsim.rng import RandomSource

PRICE_MIN = 100.0
PRICE_MAX = 105.0
QTY_MIN = 1
QTY_MAX = 100
SIDE_MIN = 0
SIDE_MAX = 1
_U32_MASK = 0xFFFFFFFF
_U8_MASK = 0xFF


class MarketFeeder:
    """Generates random limit orders on its own thread until stopped.

    `delay` is the pause between orders in microseconds.
    """

    def __init__(
        self,
        queue: ThreadSafeQueue[Order],
        rng: RandomSource,
        feeder_id: int = 0,
        delay: int = 0,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.queue = queue
        self.rng = rng
        self.feeder_id = feeder_id
        self.delay = delay
        self._next_id = 0
        self._stop = threading.Event()
        self._worker: threading.Thread | None = None

    def start(self) -> None:
        """Start producing orders on a background thread."""
        if self._worker is not None and self._worker.is_alive():
            raise RuntimeError("feeder already running")
        self._stop.clear()
        self._worker = threading.Thread(
            target=self._run, name=f"feeder-{self.feeder_id}", daemon=True
        )
        self._worker.start()

    def stop(self) -> None:
        """Stop producing and wait for the thread to finish."""
        self._stop.set()
        if self._worker is not None:
            self._worker.join()
            self._worker = None

    def _run(self) -> None:
        pause = self.delay / 1_000_000
        while not self._stop.is_set():
            self.queue.push(self.generate_order())
            self._stop.wait(pause)

    def generate_order(self) -> Order:
        """Build the next random order; ids count up from zero."""
        order_id = self._next_id
        self._next_id += 1
        timestamp = int(time.monotonic() * 1000) & _U32_MASK
        price = self.rng.uniform_real(PRICE_MIN, PRICE_MAX)
        quantity = self.rng.uniform_int(QTY_MIN, QTY_MAX)
        side = Side(self.rng.uniform_int(SIDE_MIN, SIDE_MAX) & 1)
        return Order(
            id=order_id,
            price=price,
            quantity=quantity,
            side=side,
            feeder_id=self.feeder_id & _U8_MASK,
            timestamp=timestamp,
        )

    def __enter__(self) -> MarketFeeder:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()