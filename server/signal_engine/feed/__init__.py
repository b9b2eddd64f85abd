"""
Live feed: Redis pub/sub publishing of quotes, events and contracts.

Public API:
    FeedPublisher    publish dicts to named Redis channels
    SignalPublisher  publish engine models to their channels
    FeedPoller       periodic refresh-and-publish loop
    serialize        encode (channel, dict) -> JSON string
    deserialize      decode JSON string -> (channel, dict)
"""
from signal_engine.feed.poller import FeedPoller, PollerStats
from signal_engine.feed.publisher import FeedPublisher, PublisherError, SignalPublisher
from signal_engine.feed.serializer import SerializationError, deserialize, serialize

__all__ = [
    "FeedPoller",
    "FeedPublisher",
    "PollerStats",
    "PublisherError",
    "SerializationError",
    "SignalPublisher",
    "deserialize",
    "serialize",
]
