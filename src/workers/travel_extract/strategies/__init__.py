"""Extraction tiers for hotel result pages."""

from workers.travel_extract.strategies.base import BaseStrategy, StrategyResult
from workers.travel_extract.strategies.dom import DEFAULT_CARD_SELECTOR, DomStrategy
from workers.travel_extract.strategies.hydration import HYDRATION_KEYS, HydrationStrategy
from workers.travel_extract.strategies.network import HttpxJsonFetcher, NetworkStrategy

__all__ = [
    "BaseStrategy",
    "DEFAULT_CARD_SELECTOR",
    "DomStrategy",
    "HYDRATION_KEYS",
    "HttpxJsonFetcher",
    "HydrationStrategy",
    "NetworkStrategy",
    "StrategyResult",
]
