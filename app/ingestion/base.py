"""Abstract listing source interface for ingestion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class BaseListingSource(ABC):
    """A provider that returns one ranked listing per call."""

    name: str

    @abstractmethod
    async def fetch_top_listing(self, limit: int) -> List[Dict[str, Any]]:
        """Fetch the top ``limit`` ranked records (all-or-nothing).

        Records are returned as raw provider dicts; parsing a single record
        belongs to the per-token unit of work.
        """
