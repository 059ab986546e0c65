"""Abstract base class for the hotel results tiers (Strategy Pattern)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar

from workers.travel_extract.models import HotelRoute
from workers.travel_extract.page import PageContext


@dataclass(slots=True)
class StrategyResult:
    """Rows produced by one tier, plus what the tier wants recorded in meta."""

    route: HotelRoute
    rows: list[dict[str, Any]]
    meta: dict[str, Any] = field(default_factory=dict)


class BaseStrategy(ABC):
    """
    Contract for every extraction tier.

    The page context and the row cap are injected via __init__.

    Principles:
    - Return None when the tier finds nothing; zero rows is a miss.
    - Never raise for content problems; log at DEBUG and return None.
    - Never emit more than max_rows rows.
    """

    route: ClassVar[HotelRoute]

    def __init__(self, page: PageContext, max_rows: int) -> None:
        self.page = page
        self.max_rows = max_rows

    @abstractmethod
    async def attempt(self) -> StrategyResult | None:
        ...
