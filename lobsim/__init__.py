"""Limit order book simulator: matching engine, event bus, feeders and live text views."""

__version__ = "0.1.0"

__all__ = [
    "book_side",
    "console",
    "engine",
    "events",
    "feeder",
    "listeners",
    "matching",
    "order",
    "queues",
    "rng",
    "simulator",
    "tracker",
    "views",
]