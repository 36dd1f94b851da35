import io

from lobsim.console import (
    BUY_STR,
    CYAN,
    RED,
    RESET,
    SELL_STR,
    Logger,
    colorize,
    columns,
    format_event,
    format_match,
    format_order,
    strip_ansi,
)
from lobsim.events import Event, Fill, LevelAgg, OrderAdded, OrderRemoved, OrderUpdated
from lobsim.order import Order, Side


def test_colorize_wraps_text():
    assert colorize("x", RED) == RED + "x" + RESET


def test_strip_ansi_round_trip():
    assert strip_ansi(colorize("hello", CYAN)) == "hello"


def test_strip_ansi_removes_erase_line():
    assert strip_ansi("\x1b[0;31mhi\x1b[0m\x1b[K") == "hi"


def test_side_strings_strip_to_plain_words():
    assert strip_ansi(BUY_STR) == "BUY"
    assert strip_ansi(SELL_STR) == "SELL"


def test_columns_pads_every_row():
    out = columns(["a\nbb\nccc", "d"], 5)
    lines = out.splitlines()
    assert len(lines) == 3
    assert all(len(line) == 10 for line in lines)
    assert lines[0].split() == ["a", "d"]
    assert lines[2].strip() == "ccc"
    assert out.endswith("\n")


def test_columns_empty_input():
    assert columns([], 4) == ""


def test_format_order_plain_text():
    order = Order(id=7, price=100.5, quantity=3, side=Side.BUY, timestamp=5)
    assert strip_ansi(format_order(order)) == "[Time: 5] | BUY | ID: 7 | Price: 100.5 | Qty: 3"


def test_format_order_sell_is_red():
    order = Order(id=1, price=100.0, quantity=1, side=Side.SELL)
    assert SELL_STR in format_order(order)


def test_format_match_mentions_both_orders():
    incoming = Order(id=1, price=101.0, quantity=5, side=Side.BUY)
    matched = Order(id=2, price=100.0, quantity=5, side=Side.SELL)
    text = strip_ansi(format_match(incoming, matched, 5))
    assert text.startswith("Match Detail: BUY order (ID: 1) matched with SELL order (ID: 2)")
    assert text.endswith("units at price 100\n")


def test_format_event_uses_payload_text():
    fill = Fill(1, 2, 100.0, 3)
    assert format_event(Event.make(1, 0, fill)) == "[Fill] " + str(fill)
    level = LevelAgg(Side.SELL, 101.0, 9)
    assert format_event(Event.make(1, 1, level)) == "[LevelAgg] " + str(level)
    added = OrderAdded(4, Side.BUY, 99.0, 2)
    assert format_event(Event.make(1, 2, added)) == "[OrderAdded] " + str(added)


def test_format_event_updated_and_removed():
    updated = Event.make(2, 0, OrderUpdated(3, 101.25, 4))
    assert format_event(updated) == "[OrderUpdated] ID:3 Price:101.25 Qty:4"
    removed = Event.make(2, 1, OrderRemoved(3))
    assert format_event(removed) == "[OrderRemoved] ID:3"


def test_logger_writes_one_line_per_event():
    out = io.StringIO()
    logger = Logger(out)
    events = [Event.make(1, 0, OrderRemoved(1)), Event.make(1, 1, OrderRemoved(2))]
    for event in events:
        logger.on_event(event)
    assert out.getvalue().splitlines() == [format_event(e) for e in events]