"""Terminal colouring, column layout and plain-text formatting of orders and events."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable
from itertools import zip_longest
from typing import TextIO

from lobsim.events import Event, EventListener, EventType
from lobsim.order import Order

RED = "\033[0;31m"
GREEN = "\033[0;32m"
CYAN = "\033[0;36m"
RESET = "\033[0m"

BUY_STR = f"{GREEN}BUY{RESET}"
SELL_STR = f"{RED}SELL{RESET}"

_ANSI_ESCAPE = re.compile(r"\x1B\[[0-9;]*[mK]")

_EVENT_NAMES = {
    EventType.ORDER_ADDED: "OrderAdded",
    EventType.ORDER_UPDATED: "OrderUpdated",
    EventType.ORDER_REMOVED: "OrderRemoved",
    EventType.FILL: "Fill",
    EventType.LEVEL_AGG: "LevelAgg",
}


def colorize(text: object, color: str) -> str:
    """Wrap text in a colour code and a reset code."""
    return f"{color}{text}{RESET}"


def strip_ansi(text: str) -> str:
    """Remove colour and erase-line escape codes."""
    return _ANSI_ESCAPE.sub("", text)


def columns(texts: Iterable[str], width: int) -> str:
    """Lay multi-line texts side by side, each line padded to `width` characters."""
    split = [text.splitlines() for text in texts]
    rows = []
    for row in zip_longest(*split, fillvalue=""):
        rows.append("".join(cell.ljust(width) for cell in row) + "\n")
    return "".join(rows)


def _side_str(order: Order) -> str:
    return BUY_STR if order.is_buy else SELL_STR


def format_order(order: Order) -> str:
    """One coloured line describing an order."""
    return (
        f"[{CYAN}Time: {order.timestamp}{RESET}] | {_side_str(order)}"
        f" | ID: {order.id} | Price: {order.price:g} | Qty: {order.quantity}"
    )


def format_match(incoming: Order, matched: Order, quantity: int) -> str:
    """One coloured line describing a match between two orders."""
    return (
        f"{CYAN}Match Detail:{RESET} {_side_str(incoming)} order (ID: {incoming.id})"
        f" matched with {_side_str(matched)} order (ID: {matched.id}) for "
        f"{CYAN}{quantity}{RESET} units at price {CYAN}{matched.price:g}{RESET}\n"
    )


def format_event(event: Event) -> str:
    """Log line for an event: its kind in brackets followed by its payload."""
    return f"[{_EVENT_NAMES[event.type]}] {event.payload}"


class Logger(EventListener):
    """Writes every event it receives as one line of text."""

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out

    def on_event(self, event: Event) -> None:
        out = self._out if self._out is not None else sys.stdout
        out.write(format_event(event) + "\n")