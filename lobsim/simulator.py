"""Market simulator: feeders, a matching engine thread and an optional live dashboard."""

from __future__ import annotations

import argparse
import os
import sys
import threading
import time
from typing import TextIO

from lobsim.engine import OrderBookEngine
from lobsim.events import Callback, EventBus, EventListener
from lobsim.feeder import MarketFeeder
from lobsim.listeners import MarketDataPublisher, OrderBookView, StatsCollector
from lobsim.order import Order
from lobsim.queues import SpscRing, ThreadSafeQueue
from lobsim.rng import RealRNG
from lobsim.views import Dashboard, OrderBookViewRenderer, StatsViewRenderer, TradesViewRenderer

TRADE_BUFFER_SIZE = 1024
_POLL_INTERVAL = 0.05


def _default_feeder_count() -> int:
    cores = os.cpu_count() or 0
    return cores - 1 if cores > 1 else 1


class MarketSimulator:
    """Runs random feeders into a shared queue that one engine thread drains."""

    def __init__(self, num_feeders: int | None = None, out: TextIO | None = None) -> None:
        if num_feeders is None:
            num_feeders = _default_feeder_count()
        elif num_feeders < 0:
            raise ValueError("num_feeders must not be negative")
        self.out = out
        self.order_queue: ThreadSafeQueue[Order] = ThreadSafeQueue()
        self.bus = EventBus()
        self.engine = OrderBookEngine(self.bus)
        self.feeders = [
            MarketFeeder(self.order_queue, RealRNG(), i + 1, num_feeders * 100)
            for i in range(num_feeders)
        ]
        self._running = threading.Event()
        self._engine_thread: threading.Thread | None = None
        self._live_view_listeners: list[tuple[EventListener, int]] = []

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def live_view_enabled(self) -> bool:
        return bool(self._live_view_listeners)

    def start(self) -> None:
        """Start every feeder and the engine thread."""
        if self._running.is_set():
            raise RuntimeError("simulator already running")
        self._running.set()
        for feeder in self.feeders:
            feeder.start()
        self._engine_thread = threading.Thread(
            target=self._engine_loop, name="engine", daemon=True
        )
        self._engine_thread.start()

    def stop(self) -> None:
        """Stop the feeders and wait for the engine thread to finish."""
        self._running.clear()
        for feeder in self.feeders:
            feeder.stop()
        if self._engine_thread is not None:
            self._engine_thread.join()
            self._engine_thread = None

    def _engine_loop(self) -> None:
        while self._running.is_set():
            try:
                order = self.order_queue.wait_and_pop(_POLL_INTERVAL)
            except TimeoutError:
                continue
            self.engine.add_order(order)

    def _attach(self, listener: EventListener) -> EventListener:
        handle = self.bus.add_listener(listener.on_event)
        self._live_view_listeners.append((listener, handle))
        return listener

    def enable_live_view(self, enable: bool) -> None:
        """Attach the book, stats and dashboard listeners, or detach them all."""
        if enable and not self._live_view_listeners:
            trade_buffer: SpscRing = SpscRing(TRADE_BUFFER_SIZE)
            book = self._attach(OrderBookView())
            stats = self._attach(StatsCollector(trade_buffer))
            dashboard = Dashboard()
            dashboard.add_view(OrderBookViewRenderer(book))
            dashboard.add_view(StatsViewRenderer(stats))
            dashboard.add_view(TradesViewRenderer(trade_buffer, self.engine.tick_wall_times()))
            self._attach(MarketDataPublisher(dashboard, self.out))
        elif not enable and self._live_view_listeners:
            for _, handle in self._live_view_listeners:
                self.bus.remove_listener(handle)
            self._live_view_listeners.clear()

    def add_listener(self, callback: Callback) -> int:
        """Subscribe a callback to engine events; return its handle."""
        return self.bus.add_listener(callback)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lobsim", description="Run the limit order book market simulator."
    )
    parser.add_argument("--seconds", type=float, default=3.0, help="how long to run")
    parser.add_argument("--feeders", type=int, default=None, help="number of order feeders")
    args = parser.parse_args(argv)
    if args.seconds < 0:
        parser.error("--seconds must not be negative")
    if args.feeders is not None and args.feeders < 0:
        parser.error("--feeders must not be negative")

    simulator = MarketSimulator(args.feeders)
    print("Starting Market Simulator...", flush=True)
    simulator.start()
    simulator.enable_live_view(True)
    try:
        time.sleep(args.seconds)
    finally:
        print("Stopping Market Simulator...", flush=True)
        simulator.enable_live_view(False)
        simulator.stop()
        simulator.bus.stop_all()
    print("\nSimulation ended.")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())