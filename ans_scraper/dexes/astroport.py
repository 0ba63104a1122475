"""
Astroport scraper - Factory address lookup and paginated pair listing.

The factory address comes from Astroport's published changelog, one document
per network. Those documents are not guaranteed to be valid JSON, so they are
scanned line by line for `"key": "value"` pairs.
"""

import logging
from typing import Any, Optional

import aiohttp

from ans_scraper.chain_client import ChainClient
from ans_scraper.dexes.base import DexScraper
from ans_scraper.exceptions import FetchFailedError, QueryFailedError, UnknownNetworkError
from ans_scraper.http_client import BaseHttpClient
from ans_scraper.models import PairType, RawPair, asset_identifier_from_wire


logger = logging.getLogger(__name__)

ASTROPORT_DEX = "astroport"

ASTROPORT_PHOENIX_ADDRS = "https://raw.githubusercontent.com/astroport-fi/astroport-changelog/main/terra-2/phoenix-1/core_phoenix.json"
ASTROPORT_PISCO_ADDRS = "https://raw.githubusercontent.com/astroport-fi/astroport-changelog/main/terra-2/pisco-1/core_pisco.json"

ADDRESS_DIRECTORIES = {
    "phoenix-1": ASTROPORT_PHOENIX_ADDRS,
    "pisco-1": ASTROPORT_PISCO_ADDRS,
}

FACTORY_ADDRESS_KEY = "factory_address"

# Wire pair type key -> neutral pair type; unknown keys are CUSTOM
PAIR_TYPES = {
    "xyk": PairType.CONSTANT_PRODUCT,
    "stable": PairType.STABLE,
    "concentrated": PairType.CONCENTRATED,
}


def parse_address_directory(text: str) -> dict[str, str]:
    """
    Extract `"key": "value"` pairs from a loosely formatted JSON document.

    Tolerates trailing commas and single or double quoting. Lines that do not
    split into exactly one key and one value are ignored.
    """
    addresses: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("{") or stripped.startswith("}"):
            continue

        parts = stripped.split(":")
        if len(parts) != 2:
            continue

        key = parts[0].strip().strip("\"'")
        value = parts[1].strip().rstrip(",").strip().strip("\"'")
        if key:
            addresses[key] = value
    return addresses


def parse_pair_type(pair_type: Any) -> tuple[PairType, str]:
    """Map a wire `pair_type` object to (PairType, label)."""
    if isinstance(pair_type, dict) and len(pair_type) == 1:
        key, value = next(iter(pair_type.items()))
        if key in PAIR_TYPES:
            return PAIR_TYPES[key], key
        if key == "custom" and isinstance(value, str):
            return PairType.CUSTOM, f"custom:{value}"
        return PairType.CUSTOM, str(key)
    return PairType.CUSTOM, str(pair_type)


def parse_pair(data: dict[str, Any]) -> RawPair:
    """
    Parse one `PairInfo` from a factory `pairs` response.

    Raises:
        ValueError: If the pair is malformed
    """
    try:
        pair_type, label = parse_pair_type(data["pair_type"])
        return RawPair(
            pool_id=data["contract_addr"],
            pair_type=pair_type,
            asset_infos=tuple(asset_identifier_from_wire(a) for a in data["asset_infos"]),
            pair_type_label=label,
            liquidity_token=data.get("liquidity_token"),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed pair: {data}") from e


class AstroportScraper(BaseHttpClient, DexScraper):
    """
    Astroport pool source.

    Usage:
        async with AstroportScraper(client) as astroport:
            pairs = await astroport.fetch_pools()
    """

    name = ASTROPORT_DEX

    def __init__(
        self,
        chain_client: ChainClient,
        factory_address: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout: float = BaseHttpClient.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(timeout=timeout, session=session)
        self._client = chain_client
        self._factory_address = factory_address
        self._page_size = page_size
        self._loaded_pairs: list[RawPair] = []

    @property
    def dex_id(self) -> str:
        return ASTROPORT_DEX

    async def resolve_factory_address(self) -> str:
        """
        Factory address for the client's network.

        Raises:
            UnknownNetworkError: If the network has no published factory
            FetchFailedError: If the address directory cannot be fetched
        """
        if self._factory_address:
            return self._factory_address

        chain_id = self._client.chain_id
        url = ADDRESS_DIRECTORIES.get(chain_id)
        if url is None:
            raise UnknownNetworkError(
                f"Astroport is not deployed on {chain_id}",
                chain=chain_id,
                supported_networks=sorted(ADDRESS_DIRECTORIES),
            )

        try:
            text = await self._get_text(url)
        except FetchFailedError as e:
            e.chain = chain_id
            raise

        addresses = parse_address_directory(text)
        factory_address = addresses.get(FACTORY_ADDRESS_KEY)
        if not factory_address:
            raise UnknownNetworkError(
                f"{FACTORY_ADDRESS_KEY} not found in address directory",
                chain=chain_id,
                context={"url": url},
            )

        logger.info(f"[{self.name}] Factory on {chain_id}: {factory_address}")
        self._factory_address = factory_address
        return factory_address

    def _pairs_query(self, start_after: Optional[list[dict[str, Any]]]) -> dict[str, Any]:
        query: dict[str, Any] = {"start_after": start_after}
        if self._page_size is not None:
            query["limit"] = self._page_size
        return {"pairs": query}

    async def fetch_pools(self) -> list[RawPair]:
        """
        Fetch every pair from the factory.

        Pages are requested until one comes back empty. The cursor is the
        asset-info list of the last pair of the previous page.
        """
        if self._loaded_pairs:
            return list(self._loaded_pairs)

        factory = await self.resolve_factory_address()

        all_pairs: list[RawPair] = []
        start_after: Optional[list[dict[str, Any]]] = None
        page = 0
        while True:
            query = self._pairs_query(start_after)
            response = await self._client.query_contract(factory, query)

            raw_pairs = response.get("pairs") if isinstance(response, dict) else None
            if not isinstance(raw_pairs, list):
                raise QueryFailedError(
                    "Factory pairs response has no pairs list",
                    chain=self._client.chain_id,
                    address=factory,
                    query=query,
                )
            if not raw_pairs:
                break

            try:
                all_pairs.extend(parse_pair(p) for p in raw_pairs)
            except ValueError as e:
                raise QueryFailedError(
                    str(e),
                    chain=self._client.chain_id,
                    address=factory,
                    query=query,
                    original_error=e,
                )

            next_cursor = raw_pairs[-1]["asset_infos"]
            if next_cursor == start_after:
                raise QueryFailedError(
                    "Factory returned the same page twice",
                    chain=self._client.chain_id,
                    address=factory,
                    query=query,
                )
            start_after = next_cursor
            page += 1
            logger.debug(f"[{self.name}] Page {page}: {len(raw_pairs)} pairs")

        logger.info(f"[{self.name}] Loaded {len(all_pairs)} pairs in {page} pages")
        self._loaded_pairs = all_pairs
        return list(all_pairs)
