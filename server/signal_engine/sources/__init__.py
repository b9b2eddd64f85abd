"""
Source Clients

One client per upstream provider and resource. Every client answers
``fetch(key)`` with a FetchOutcome and never raises for provider errors.
"""
from signal_engine.sources.aishub import AISHubClient, BoundingBox
from signal_engine.sources.base import HttpSourceClient, SourceClient
from signal_engine.sources.google_news import GoogleNewsClient
from signal_engine.sources.history import HistoryRequest
from signal_engine.sources.iex import IEXQuoteClient
from signal_engine.sources.news import CATEGORY_TERMS, EventQuery
from signal_engine.sources.polygon import PolygonHistoryClient, PolygonQuoteClient
from signal_engine.sources.reddit import RedditClient
from signal_engine.sources.thenewsapi import TheNewsApiClient
from signal_engine.sources.usaspending import ContractQuery, USASpendingClient
from signal_engine.sources.worldnews import WorldNewsClient
from signal_engine.sources.yahoo import YahooHistoryClient, YahooQuoteClient

__all__ = [
    "AISHubClient",
    "BoundingBox",
    "CATEGORY_TERMS",
    "ContractQuery",
    "EventQuery",
    "GoogleNewsClient",
    "HistoryRequest",
    "HttpSourceClient",
    "IEXQuoteClient",
    "PolygonHistoryClient",
    "PolygonQuoteClient",
    "RedditClient",
    "SourceClient",
    "TheNewsApiClient",
    "USASpendingClient",
    "WorldNewsClient",
    "YahooHistoryClient",
    "YahooQuoteClient",
]
