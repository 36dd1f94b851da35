import pytest

from lobsim.order import Control, Order, Side, encode_order_id


def create_buy(order_id=1, price=100.0, qty=10, feeder=0, ts=123456789, flags=0):
    return Order(order_id, price, qty, Side.BUY, feeder, ts, control_flags=Control(flags))


def create_sell(order_id=1, price=100.0, qty=10, feeder=0, ts=123456789, flags=0):
    return Order(order_id, price, qty, Side.SELL, feeder, ts, control_flags=Control(flags))


FLAG_NAMES = [
    "iceberg",
    "hidden",
    "weighted",
    "auction",
    "ioc",
    "fok",
    "market",
    "reserved_flag",
]


def test_field_assignment():
    order = create_buy()
    order.ioc = True
    assert order.id == 1
    assert order.side is Side.BUY
    assert order.price == pytest.approx(100.0)
    assert order.quantity == 10
    assert order.timestamp == 123456789
    assert order.ioc is True


def test_control_flags_initially_clear():
    order = create_sell()
    assert [getattr(order, name) for name in FLAG_NAMES] == [False] * 8


@pytest.mark.parametrize("name", FLAG_NAMES)
def test_control_flag_set_and_reset(name):
    order = create_sell()
    setattr(order, name, True)
    assert getattr(order, name) is True
    setattr(order, name, False)
    assert getattr(order, name) is False


def test_all_flags_accumulate():
    order = create_sell()
    for name in FLAG_NAMES:
        setattr(order, name, True)
    assert int(order.control_flags) == 0xFF
    for name in FLAG_NAMES:
        setattr(order, name, False)
    assert int(order.control_flags) == 0


def test_to_string_buy():
    result = create_buy().to_string()
    for part in ("Side:BUY", "Price:100.00", "Qty:10", "ID:1", "Time:123456789"):
        assert part in result


def test_to_string_sell():
    result = create_sell().to_string()
    for part in ("Side:SELL", "Price:100.00", "Qty:10", "ID:1", "Time:123456789"):
        assert part in result


def test_to_string_exact():
    assert create_buy().to_string() == "ID:1 Side:BUY Price:100.00 Qty:10 Time:123456789"


def test_summary_and_str():
    order = create_sell(7, 101.5, 3)
    assert order.summary() == "ID:7 Side:SELL Price:101.50 Qty:3"
    assert str(order) == "ID:7 Side:SELL Price:101.50 Qty:3"


def test_side_predicates():
    assert create_buy().is_buy and not create_buy().is_sell
    assert create_sell().is_sell and not create_sell().is_buy


def test_side_from_int_and_invalid():
    assert Order(side=1).side is Side.SELL
    with pytest.raises(ValueError):
        Order(side=2)


def test_has_flag_and_set_flag():
    order = create_buy(flags=Control.FOK | Control.MARKET)
    assert order.has_flag(Control.FOK)
    assert order.has_flag(Control.MARKET)
    assert not order.has_flag(Control.IOC)
    order.set_flag(Control.FOK, False)
    assert not order.fok
    assert order.market


def test_effective_qty():
    order = create_buy(qty=50)
    order.visible_qty = 5
    assert order.effective_qty() == 50
    order.iceberg = True
    assert order.effective_qty() == 5


def test_effective_weight():
    order = create_buy()
    order.weight = 42
    assert order.effective_weight() == 0
    order.weighted = True
    assert order.effective_weight() == 42


def test_default_order_is_zeroed():
    order = Order()
    assert (order.id, order.price, order.quantity, order.side) == (0, 0.0, 0, Side.BUY)
    assert int(order.control_flags) == 0


def test_encode_order_id():
    assert encode_order_id(0, 5) == 5
    assert encode_order_id(1, 5) == 281474976710661
    assert encode_order_id(0xFFFF, 0) == 0xFFFF000000000000


def test_encode_order_id_feeder_is_16_bits():
    assert encode_order_id(0x10001, 0) == encode_order_id(1, 0)