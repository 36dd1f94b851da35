# lobsim

A limit order book simulator. Random order feeders push orders into a shared
queue, a single engine thread matches them by price-time priority, and every
change to the book is published on an event bus, where listeners count
orders, fills and cancels, keep a level-2 view of the book and redraw a text
dashboard in the terminal.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running the simulator

```
lobsim
```

This starts the feeders and the engine, turns on the live dashboard (order
book depth, statistics and the last three trades), runs for three seconds,
then stops everything and exits. Options:

- `--seconds N` sets how long to run (default 3).
- `--feeders N` sets how many feeders to start. The default is one fewer than
  the number of CPUs, and at least one.

Each feeder generates orders with prices in [100, 105) and quantities from 1
to 100, on a random side, and pauses `100 × number of feeders` microseconds
between orders. The dashboard is redrawn every ten events and pauses half a
second after each redraw.

## Using it from Python

### The simulator

```python
from lobsim.simulator import MarketSimulator

sim = MarketSimulator(num_feeders=2)
sim.start()
sim.enable_live_view(True)
# ... let it run ...
sim.enable_live_view(False)
sim.stop()
sim.bus.stop_all()
```

`MarketSimulator.add_listener(callback)` subscribes any callable to the
simulator's event bus and returns a handle; `sim.bus.remove_listener(handle)`
unsubscribes it. `stop()` stops the feeders and the engine thread;
`sim.bus.stop_all()` also stops every listener thread.

### The engine

```python
from lobsim.engine import OrderBookEngine
from lobsim.events import EventBus
from lobsim.order import Order, Side

with EventBus() as bus:
    engine = OrderBookEngine(bus)
    engine.add_order(Order(id=1, price=100.0, quantity=10, side=Side.SELL))
    buy = Order(id=2, price=100.0, quantity=4, side=Side.BUY)
    engine.add_order(buy)

    print(buy.quantity)                                     # 0, fully filled
    print(engine.asks.get_orders_at_price(100.0)[0].quantity)  # 6
    print(engine.bids.best_price())                         # None
```

`add_order` matches the order against the opposite side, applies the fills to
the resting orders and reduces the incoming order's `quantity` to what was
left unfilled. A remainder rests in the book unless the order is IOC or FOK.
`cancel_order(order_id)` removes a resting order; unknown ids are ignored.
The engine publishes `Fill`, `OrderAdded`, `OrderRemoved` and `LevelAgg`
events, each stamped with a logical tick and a sequence number within that
tick; `tick_wall_times()` gives the monotonic-clock millisecond time recorded
for each tick.

Leaving the `with` block calls `EventBus.stop_all()`.

### The pieces

- `lobsim.order`: `Order`, `Side` and the `Control` flags. Flags are
  properties (`order.ioc = True`, `order.fok`, `order.market`,
  `order.iceberg`, ...). `encode_order_id(feeder_id, counter)` packs a 16-bit
  feeder id into the top bits of a 64-bit id.
- `lobsim.book_side`: `OrderBookSide`, one side of the book. Levels are kept
  best first (highest bid, lowest ask), orders are kept oldest first within a
  level, and `levels()` yields `PriceLevelView` summaries.
- `lobsim.matching`: `PriceTimePriorityStrategy.match(incoming, opposite)`
  returns a `MatchResult` holding the planned `FillOp`s and the filled
  quantity, without changing the book. Market orders accept any price, and
  FOK orders that cannot be filled in full produce no fills and set
  `all_or_none_failed`. With `update_incoming=True` the strategy also reduces
  the incoming order's quantity.
- `lobsim.events`: the payload types (`OrderAdded`, `OrderUpdated`,
  `OrderRemoved`, `Fill`, `LevelAgg`), `Event`, `TradeInfo` and `EventBus`.
  The bus delivers events to each listener on that listener's own thread
  through a bounded ring. A `Backpressure` policy (`DROP`, `BLOCK`,
  `SPIN_YIELD`) decides what happens when a listener's ring is full.
- `lobsim.listeners`: `OrderBookView` (level-2 snapshot with `top_n` and
  `get_qty_at_price`), `StatsCollector` (order, fill and cancel counts, last
  level prices, recent trades pushed to a ring) and `MarketDataPublisher`
  (redraws a dashboard every N events).
- `lobsim.views`: `Dashboard`, `OrderBookViewRenderer`, `StatsViewRenderer`
  and `TradesViewRenderer`. Each renders to a text stream and returns the
  number of lines it wrote.
- `lobsim.feeder`: `MarketFeeder`, a background thread producing random
  orders from any `RandomSource`. It can be used as a context manager.
- `lobsim.rng`: `RealRNG` (seedable) and `MockRNG`, which replays a fixed
  list of values in a loop.
- `lobsim.queues`: `ThreadSafeQueue` (unbounded, with a blocking
  `wait_and_pop(timeout)`), `SpscRing` and `MpscRing` (bounded,
  power-of-two capacity).
- `lobsim.tracker`: `OrderTracker`, which keeps the latest copy of each order
  while it is enabled. `build_side_by_side_view()` returns a summary by side,
  the top feeders by volume and by count, and the buy/sell flow imbalance.
- `lobsim.console`: ANSI colour helpers (`colorize`, `strip_ansi`,
  `columns`), `format_order`, `format_match`, `format_event`, and a `Logger`
  listener that writes one line per event:

  ```python
  from lobsim.console import Logger
  bus.add_listener(Logger().on_event)
  ```

## What it does not do

- The dashboard only redraws. It does not read the keyboard, and
  `View.on_key` does nothing.
- Nothing is stored: books, trades and statistics live in memory only and
  are gone when the process ends.
- Feeders number their orders from zero each, without the feeder id, so
  orders from different feeders can share an id.
- `OrderBookSide.on_event` only logs the events it sees; only the engine
  changes the book.