"""
Chain Registry Cache - Locally persisted chain-registry asset lists.

One JSON file per chain under the cache directory. A cached file is used as
is (no TTL, no re-validation); a missing one is fetched from the registry and
written before it is returned.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

import aiohttp

from ans_scraper.exceptions import CacheError, FetchFailedError
from ans_scraper.http_client import BaseHttpClient
from ans_scraper.models import ChainAsset, ChainAssetList


logger = logging.getLogger(__name__)


class ChainRegistryCache(BaseHttpClient):
    """
    Loads chain asset lists, from disk when possible.

    The handle is created per pipeline run and passed to whoever needs it.
    After `load()`, `asset_lists` iterates in directory order, which is the
    order denom lookups scan in.

    Usage:
        cache = ChainRegistryCache(Path("cache/asset_lists"))
        lists = await cache.load(["osmosis", "persistence"])
        asset = cache.asset_by_denom("uxprt")
    """

    name = "registry"

    def __init__(
        self,
        cache_dir: Path,
        registry_base_url: str,
        timeout: float = BaseHttpClient.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(timeout=timeout, session=session)
        self._cache_dir = Path(cache_dir)
        self._registry_base_url = registry_base_url.rstrip("/")
        self._asset_lists: dict[str, ChainAssetList] = {}
        self._cache_hits = 0
        self._cache_misses = 0

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def asset_lists(self) -> list[ChainAssetList]:
        """Loaded asset lists in scan order."""
        return list(self._asset_lists.values())

    def cache_path(self, chain: str) -> Path:
        return self._cache_dir / f"{chain}.json"

    def asset_list_url(self, chain: str) -> str:
        return f"{self._registry_base_url}/{chain}/assetlist.json"

    async def load(self, chain_directory: Iterable[str]) -> dict[str, ChainAssetList]:
        """
        Load the asset list of every chain in the directory.

        Args:
            chain_directory: Chain keys, in the order lookups should scan them

        Returns:
            Mapping of chain key to asset list, in directory order

        Raises:
            FetchFailedError: If any uncached chain cannot be fetched
            CacheError: If the cache cannot be read or written
        """
        chains = list(dict.fromkeys(chain_directory))
        logger.info(f"[{self.name}] Loading asset lists for {len(chains)} chains")

        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError(
                f"Cannot create cache directory {self._cache_dir}",
                cache_path=str(self._cache_dir),
                operation="write",
                original_error=e,
            )

        loaded: dict[str, ChainAssetList] = {}
        for chain in chains:
            asset_list = self._read_cached(chain)
            if asset_list is not None:
                self._cache_hits += 1
            else:
                self._cache_misses += 1
                asset_list = await self._fetch(chain)
                self._write_cached(chain, asset_list)
            loaded[chain] = asset_list

        self._asset_lists = loaded
        logger.info(
            f"[{self.name}] Loaded {len(loaded)} asset lists "
            f"({self._cache_hits} cached, {self._cache_misses} fetched)"
        )
        return dict(loaded)

    def asset_by_denom(self, denom: str) -> Optional[ChainAsset]:
        """First registry asset, in scan order, that knows `denom`."""
        for asset_list in self._asset_lists.values():
            asset = asset_list.find_by_denom(denom)
            if asset is not None:
                return asset
        return None

    def get_cache_stats(self) -> dict[str, int]:
        return {
            "entries": len(self._asset_lists),
            "hits": self._cache_hits,
            "misses": self._cache_misses,
        }

    # ─────────────────────────────────────────────────────────────
    # Persistence
    # ─────────────────────────────────────────────────────────────

    def _read_cached(self, chain: str) -> Optional[ChainAssetList]:
        path = self.cache_path(chain)
        if not path.exists():
            return None
        try:
            with open(path, "r") as f:
                return ChainAssetList.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as e:
            raise CacheError(
                f"Corrupt cache file for {chain}",
                cache_path=str(path),
                operation="read",
                original_error=e,
            )

    def _write_cached(self, chain: str, asset_list: ChainAssetList) -> None:
        path = self.cache_path(chain)
        try:
            with open(path, "w") as f:
                json.dump(asset_list.to_dict(), f)
        except OSError as e:
            raise CacheError(
                f"Cannot write cache file for {chain}",
                cache_path=str(path),
                operation="write",
                original_error=e,
            )

    async def _fetch(self, chain: str) -> ChainAssetList:
        url = self.asset_list_url(chain)
        logger.info(f"[{self.name}] Fetching asset list for {chain}")
        try:
            data = await self._get_json(url)
        except FetchFailedError as e:
            e.chain = chain
            raise

        try:
            return ChainAssetList.from_dict(data)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise FetchFailedError(
                f"Malformed asset list for {chain}",
                chain=chain,
                request_url=url,
                original_error=e,
            )
