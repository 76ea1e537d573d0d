"""
Abstract data store used by the edge services.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any

from tabletads.schemas.internal import ImpressionRecord


class AdStore(ABC):
    """
    The three store capabilities the edge functions rely on.

    Geofencing, category matching and the budget arithmetic all live in the
    database; implementations only forward calls and translate failures
    into ``UpstreamError``.
    """

    @abstractmethod
    async def fetch_ads_for_location(
        self,
        lat: float,
        lng: float,
        categories: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Return candidate ad rows eligible at the given position.

        Args:
            lat: Latitude
            lng: Longitude
            categories: Optional category filter, ``None`` for all

        Returns:
            Raw rows as returned by the location RPC
        """
        pass

    @abstractmethod
    async def insert_impression(self, impression: ImpressionRecord) -> None:
        """Write one impression row."""
        pass

    @abstractmethod
    async def increment_budget_used(self, campaign_id: str, amount: Decimal) -> None:
        """Atomically add ``amount`` to the campaign's consumed budget."""
        pass
