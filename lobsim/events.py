"""Market events, their payloads, and a per-listener threaded event bus."""

from __future__ import annotations

import abc
import enum
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

from lobsim.order import Side
from lobsim.queues import SpscRing

_IDLE_WAIT = 0.05
_SPINS_PER_YIELD = 64


class EventType(enum.IntEnum):
    """Kind of payload an event carries."""

    ORDER_ADDED = 0
    ORDER_UPDATED = 1
    ORDER_REMOVED = 2
    FILL = 3
    LEVEL_AGG = 4


@dataclass(frozen=True)
class OrderAdded:
    """An order came to rest in the book."""

    id: int
    side: Side
    px: float
    qty: int

    def __str__(self) -> str:
        return f"ID:{self.id} Side:{int(self.side)} Price:{self.px:.2f} Qty:{self.qty}"


@dataclass(frozen=True)
class OrderUpdated:
    """A resting order changed after a partial fill or amendment."""

    id: int
    px: float
    qty: int

    def __str__(self) -> str:
        return f"ID:{self.id} Price:{self.px:.2f} Qty:{self.qty}"


@dataclass(frozen=True)
class OrderRemoved:
    """A resting order left the book."""

    id: int

    def __str__(self) -> str:
        return f"ID:{self.id}"


@dataclass(frozen=True)
class Fill:
    """A trade between a resting maker and an incoming taker."""

    maker_id: int
    taker_id: int
    px: float
    qty: int

    def __str__(self) -> str:
        return (
            f"Maker:{self.maker_id} Taker:{self.taker_id} "
            f"Price:{self.px:.2f} Qty:{self.qty}"
        )


@dataclass(frozen=True)
class LevelAgg:
    """Aggregate resting quantity at one price on one side."""

    side: Side
    px: float
    agg_qty: int

    def __str__(self) -> str:
        return f"Side:{int(self.side)} Price:{self.px:.2f} AggQty:{self.agg_qty}"


@dataclass(frozen=True)
class TradeInfo:
    """An executed trade, as shown to views and logs."""

    maker_id: int
    taker_id: int
    price: float
    qty: int
    ts: int
    seq: int

    def __str__(self) -> str:
        return (
            f"Time:{self.ts} Maker:{self.maker_id} Taker:{self.taker_id} "
            f"Price:{self.price:.2f} Qty:{self.qty}"
        )


Payload = Union[OrderAdded, OrderUpdated, OrderRemoved, Fill, LevelAgg]

_PAYLOAD_TYPES: dict[type, EventType] = {
    OrderAdded: EventType.ORDER_ADDED,
    OrderUpdated: EventType.ORDER_UPDATED,
    OrderRemoved: EventType.ORDER_REMOVED,
    Fill: EventType.FILL,
    LevelAgg: EventType.LEVEL_AGG,
}


@dataclass(frozen=True)
class Event:
    """A payload stamped with its logical tick and sequence number."""

    type: EventType
    seq: int
    ts: int
    payload: Payload

    @classmethod
    def make(cls, ts: int, seq: int, payload: Payload) -> Event:
        """Build an event, deriving its type from the payload."""
        try:
            kind = _PAYLOAD_TYPES[type(payload)]
        except KeyError:
            raise TypeError(f"unsupported event payload: {type(payload).__name__}") from None
        return cls(kind, seq, ts, payload)


class EventListener(abc.ABC):
    """Anything that reacts to events from the bus."""

    @abc.abstractmethod
    def on_event(self, event: Event) -> None:
        """Handle one event."""


class Backpressure(enum.Enum):
    """What publishing does when a listener's ring is full."""

    DROP = enum.auto()
    BLOCK = enum.auto()
    SPIN_YIELD = enum.auto()


Callback = Callable[[Event], None]


class _Endpoint:
    """One listener: its ring, its callback and the thread that feeds it."""

    def __init__(self, capacity: int, callback: Callback, backpressure: Backpressure) -> None:
        self.ring: SpscRing[Event] = SpscRing(capacity)
        self.callback = callback
        self.backpressure = backpressure
        self.running = threading.Event()
        self.running.set()
        self.wakeup = threading.Event()
        self.thread = threading.Thread(target=self._run, name="event-listener", daemon=True)
        self.thread.start()

    def _run(self) -> None:
        while self.running.is_set():
            self.wakeup.clear()
            while (event := self.ring.pop()) is not None:
                if not self.running.is_set():
                    break
                self.callback(event)
            self.wakeup.wait(_IDLE_WAIT)
        self._discard()

    def _discard(self) -> None:
        while self.ring.pop() is not None:
            pass

    def push(self, event: Event) -> None:
        if self.backpressure is Backpressure.DROP:
            self.ring.push(event)
        else:
            spins = 0
            while not self.ring.push(event):
                if not self.running.is_set():
                    return
                self.wakeup.set()
                spins += 1
                if self.backpressure is Backpressure.SPIN_YIELD and spins % _SPINS_PER_YIELD == 0:
                    time.sleep(0)
        self.wakeup.set()

    def stop(self) -> None:
        self.running.clear()
        self.wakeup.set()
        self._discard()
        if self.thread is not threading.current_thread():
            self.thread.join()

    def signal_stop(self) -> None:
        self.running.clear()
        self.wakeup.set()


class EventBus:
    """Fans events out to listeners, each served by its own thread and ring."""

    def __init__(self, capacity: int = 1 << 12) -> None:
        if capacity < 1 or capacity & (capacity - 1):
            raise ValueError(f"capacity must be a positive power of two, got {capacity}")
        self._capacity = capacity
        self._listeners: list[_Endpoint | None] = []
        self._lock = threading.Lock()

    def add_listener(
        self, callback: Callback, backpressure: Backpressure = Backpressure.SPIN_YIELD
    ) -> int:
        """Register a callback and return the handle used to remove it."""
        endpoint = _Endpoint(self._capacity, callback, backpressure)
        with self._lock:
            self._listeners.append(endpoint)
            return len(self._listeners) - 1

    def remove_listener(self, handle: int) -> None:
        """Stop a listener, discarding anything it has not yet handled."""
        with self._lock:
            if not 0 <= handle < len(self._listeners):
                return
            endpoint = self._listeners[handle]
            self._listeners[handle] = None
        if endpoint is not None:
            endpoint.stop()

    def stop_all(self) -> None:
        """Stop and forget every listener."""
        with self._lock:
            endpoints = [ep for ep in self._listeners if ep is not None]
            self._listeners.clear()
        for endpoint in endpoints:
            endpoint.signal_stop()
        for endpoint in endpoints:
            endpoint.stop()

    def publish(self, event: Event) -> None:
        """Hand an event to every listener; meant for a single publishing thread."""
        with self._lock:
            endpoints = [ep for ep in self._listeners if ep is not None]
        for endpoint in endpoints:
            endpoint.push(event)

    def emit(self, ts: int, seq: int, payload: Payload) -> None:
        """Wrap a payload in an event and publish it."""
        self.publish(Event.make(ts, seq, payload))

    def __enter__(self) -> EventBus:
        return self

    def __exit__(self, *args: object) -> None:
        self.stop_all()