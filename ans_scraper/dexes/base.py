"""
Base DEX scraper - the interface every supported DEX implements.
"""

from abc import ABC, abstractmethod

from ans_scraper.models import AssetIdentifier, RawPair


class DexScraper(ABC):
    """
    A source of pools and assets for one DEX on one network.

    Implementations must provide:
    1. dex_id - constant DEX tag written into pool metadata
    2. fetch_asset_infos() - every asset identifier traded by any pool
    3. fetch_pools() - every pool, unresolved
    """

    @property
    @abstractmethod
    def dex_id(self) -> str:
        """DEX tag, e.g. "astroport"."""
        pass

    @abstractmethod
    async def fetch_pools(self) -> list[RawPair]:
        """
        Fetch the complete pool list.

        Raises:
            QueryFailedError: If any page cannot be fetched
        """
        pass

    async def fetch_asset_infos(self) -> list[AssetIdentifier]:
        """Flattened asset identifiers of every pool, in pool order."""
        return [
            asset_info
            for pair in await self.fetch_pools()
            for asset_info in pair.asset_infos
        ]
