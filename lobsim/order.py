"""Order record, side and control flags, and order-id encoding."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

FEEDER_ID_BITS = 16
COUNTER_BITS = 64 - FEEDER_ID_BITS
_U64_MASK = (1 << 64) - 1
_FEEDER_MASK = (1 << FEEDER_ID_BITS) - 1


class Side(enum.IntEnum):
    """Which side of the book an order rests on."""

    BUY = 0
    SELL = 1


class Control(enum.IntFlag):
    """Execution and visibility flags an order may carry."""

    ICEBERG = 1 << 0
    HIDDEN = 1 << 1
    WEIGHT = 1 << 2
    AUCTION = 1 << 3
    IOC = 1 << 4
    FOK = 1 << 5
    MARKET = 1 << 6
    RESERVED = 1 << 7


def encode_order_id(feeder_id: int, counter: int) -> int:
    """Pack a 16-bit feeder id into the top bits of a 64-bit order id."""
    return (((feeder_id & _FEEDER_MASK) << COUNTER_BITS) | counter) & _U64_MASK


@dataclass
class Order:
    """A single limit order as it travels through the feeder and the engine."""

    id: int = 0
    price: float = 0.0
    quantity: int = 0
    side: Side = Side.BUY
    feeder_id: int = 0
    timestamp: int = 0
    control_flags: Control = field(default=Control(0))
    sequence_number: int = 0
    visible_qty: int = 0
    hidden_qty: int = 0
    weight: int = 0

    def __post_init__(self) -> None:
        self.side = Side(self.side)
        self.control_flags = Control(self.control_flags)

    def to_string(self) -> str:
        """Return the full one-line description, timestamp included."""
        side = "BUY" if self.is_buy else "SELL"
        return (
            f"ID:{self.id} Side:{side} Price:{self.price:.2f} "
            f"Qty:{self.quantity} Time:{self.timestamp}"
        )

    def summary(self) -> str:
        """Return the short description used in log lines."""
        side = "BUY" if self.is_buy else "SELL"
        return f"ID:{self.id} Side:{side} Price:{self.price:.2f} Qty:{self.quantity}"

    def __str__(self) -> str:
        return self.summary()

    @property
    def is_buy(self) -> bool:
        return self.side is Side.BUY

    @property
    def is_sell(self) -> bool:
        return self.side is Side.SELL

    def has_flag(self, flag: Control) -> bool:
        return bool(self.control_flags & flag)

    def set_flag(self, flag: Control, value: bool) -> None:
        if value:
            self.control_flags |= flag
        else:
            self.control_flags &= ~flag

    @property
    def iceberg(self) -> bool:
        return self.has_flag(Control.ICEBERG)

    @iceberg.setter
    def iceberg(self, value: bool) -> None:
        self.set_flag(Control.ICEBERG, value)

    @property
    def hidden(self) -> bool:
        return self.has_flag(Control.HIDDEN)

    @hidden.setter
    def hidden(self, value: bool) -> None:
        self.set_flag(Control.HIDDEN, value)

    @property
    def weighted(self) -> bool:
        return self.has_flag(Control.WEIGHT)

    @weighted.setter
    def weighted(self, value: bool) -> None:
        self.set_flag(Control.WEIGHT, value)

    @property
    def auction(self) -> bool:
        return self.has_flag(Control.AUCTION)

    @auction.setter
    def auction(self, value: bool) -> None:
        self.set_flag(Control.AUCTION, value)

    @property
    def ioc(self) -> bool:
        return self.has_flag(Control.IOC)

    @ioc.setter
    def ioc(self, value: bool) -> None:
        self.set_flag(Control.IOC, value)

    @property
    def fok(self) -> bool:
        return self.has_flag(Control.FOK)

    @fok.setter
    def fok(self, value: bool) -> None:
        self.set_flag(Control.FOK, value)

    @property
    def market(self) -> bool:
        return self.has_flag(Control.MARKET)

    @market.setter
    def market(self, value: bool) -> None:
        self.set_flag(Control.MARKET, value)

    @property
    def reserved_flag(self) -> bool:
        return self.has_flag(Control.RESERVED)

    @reserved_flag.setter
    def reserved_flag(self, value: bool) -> None:
        self.set_flag(Control.RESERVED, value)

    def effective_qty(self) -> int:
        """Visible quantity for icebergs, full quantity otherwise."""
        return self.visible_qty if self.iceberg else self.quantity

    def effective_weight(self) -> int:
        """Weight for weighted orders, zero otherwise."""
        return self.weight if self.weighted else 0