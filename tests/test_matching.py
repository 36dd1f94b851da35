import pytest

from lobsim.book_side import OrderBookSide
from lobsim.matching import FillOp, MatchingStrategy, MatchResult, PriceTimePriorityStrategy
from lobsim.order import Control, Order, Side


def make_order(side, order_id=1, price=100.0, qty=10, feeder=0, ts=123456789, flags=0):
    return Order(
        id=order_id,
        price=price,
        quantity=qty,
        side=side,
        feeder_id=feeder,
        timestamp=ts,
        control_flags=Control(flags),
    )


def make_buy(*args, **kwargs):
    return make_order(Side.BUY, *args, **kwargs)


def make_sell(*args, **kwargs):
    return make_order(Side.SELL, *args, **kwargs)


def asks_with(*orders):
    side = OrderBookSide(Side.SELL)
    for order in orders:
        side.add_order(order)
    return side


def bids_with(*orders):
    side = OrderBookSide(Side.BUY)
    for order in orders:
        side.add_order(order)
    return side


@pytest.fixture
def strategy():
    return PriceTimePriorityStrategy(update_incoming=True)


def test_partial_fill(strategy):
    asks = asks_with(make_sell(1, 100.0, 5))
    incoming = make_buy(99, 100.0, 10)

    result = strategy.match(incoming, asks)

    assert len(result.fills) == 1
    assert result.fills[0].quantity == 5
    assert incoming.quantity == 5
    assert result.fills[0].price == 100
    assert result.filled_qty == 5


def test_no_fill_price_too_low(strategy):
    asks = asks_with(make_sell(1, 101.0, 10))
    incoming = make_buy(99, 100.0, 10)

    result = strategy.match(incoming, asks)

    assert result.fills == []
    assert incoming.quantity == 10
    assert result.filled_qty == 0


def test_exact_match(strategy):
    asks = asks_with(make_sell(1, 100.0, 10))
    incoming = make_buy(99, 100.0, 10)

    result = strategy.match(incoming, asks)

    assert len(result.fills) == 1
    assert result.fills[0].quantity == 10
    assert incoming.quantity == 0
    assert result.fills[0].price == 100
    assert result.filled_qty == 10


def test_fills_multiple_price_levels(strategy):
    asks = asks_with(make_sell(1, 100.0, 5), make_sell(2, 101.0, 10))
    incoming = make_buy(99, 101.0, 12)

    result = strategy.match(incoming, asks)

    assert len(result.fills) == 2
    assert result.fills[0].quantity == 5
    assert result.fills[1].quantity == 7
    assert incoming.quantity == 0
    assert result.fills[0].price == 100
    assert result.fills[1].price == 101
    assert result.filled_qty == 12


def test_incoming_smaller_than_top_of_book(strategy):
    asks = asks_with(make_sell(1, 100.0, 10))
    incoming = make_buy(99, 100.0, 3)

    result = strategy.match(incoming, asks)

    assert len(result.fills) == 1
    assert result.fills[0].quantity == 3
    assert incoming.quantity == 0
    assert result.fills[0].price == 100
    assert result.filled_qty == 3


def test_fifo_within_level_and_maker_ids(strategy):
    asks = asks_with(make_sell(1, 100.0, 10), make_sell(2, 100.0, 5), make_sell(3, 101.0, 20))
    incoming = make_buy(99, 100.0, 12)

    result = strategy.match(incoming, asks)

    assert result.fills == [FillOp(1, 10, 100.0), FillOp(2, 2, 100.0)]


def test_sell_walks_bids_from_highest(strategy):
    bids = bids_with(make_buy(1, 101.0, 10), make_buy(2, 100.0, 5))
    incoming = make_sell(3, 100.0, 12)

    result = strategy.match(incoming, bids)

    assert result.fills == [FillOp(1, 10, 101.0), FillOp(2, 2, 100.0)]
    assert result.filled_qty == 12


def test_book_is_not_modified():
    asks = asks_with(make_sell(1, 100.0, 5))
    incoming = make_buy(99, 100.0, 10)

    result = PriceTimePriorityStrategy().match(incoming, asks)

    assert result.filled_qty == 5
    assert incoming.quantity == 10
    assert asks.get_orders_at_price(100.0)[0].quantity == 5


def test_fok_fails_without_enough_liquidity(strategy):
    asks = asks_with(make_sell(1, 100.0, 5), make_sell(2, 102.0, 50))
    incoming = make_buy(99, 101.0, 10, flags=Control.FOK)

    result = strategy.match(incoming, asks)

    assert result.all_or_none_failed
    assert result.fills == []
    assert result.filled_qty == 0
    assert incoming.quantity == 10


def test_fok_fills_when_liquidity_suffices(strategy):
    asks = asks_with(make_sell(1, 100.0, 5), make_sell(2, 101.0, 10))
    incoming = make_buy(99, 101.0, 12, flags=Control.FOK)

    result = strategy.match(incoming, asks)

    assert not result.all_or_none_failed
    assert result.filled_qty == 12


def test_market_order_ignores_price(strategy):
    asks = asks_with(make_sell(1, 150.0, 4))
    incoming = make_buy(99, 1.0, 4, flags=Control.MARKET)

    result = strategy.match(incoming, asks)

    assert result.fills == [FillOp(1, 4, 150.0)]


def test_zero_quantity_matches_nothing(strategy):
    asks = asks_with(make_sell(1, 100.0, 5))
    result = strategy.match(make_buy(99, 100.0, 0), asks)
    assert result == MatchResult()


def test_result_and_fill_formats():
    assert str(FillOp(1, 5, 100.0)) == "makerOrderId:1 Qty:5 Price:100.00"
    assert str(MatchResult(5, False)) == "filledQty:5 allOrNoneFailed:false"


def test_matching_strategy_is_abstract():
    with pytest.raises(TypeError):
        MatchingStrategy()