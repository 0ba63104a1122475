"""
DEX scraper factory.

The set of supported DEXes is closed; adding one means adding a class here.
"""

from typing import Optional, Type

import aiohttp

from ans_scraper.chain_client import ChainClient
from ans_scraper.config import ScraperConfig
from ans_scraper.dexes.astroport import ASTROPORT_DEX, AstroportScraper
from ans_scraper.dexes.base import DexScraper


SUPPORTED_DEXES: dict[str, Type[DexScraper]] = {
    ASTROPORT_DEX: AstroportScraper,
}


def list_supported() -> list[str]:
    return sorted(SUPPORTED_DEXES)


def create_dex_scraper(
    dex_id: str,
    chain_client: ChainClient,
    config: ScraperConfig,
    session: Optional[aiohttp.ClientSession] = None,
) -> DexScraper:
    """
    Create the scraper for `dex_id`.

    Raises:
        ValueError: If the DEX is not supported
    """
    dex_id = dex_id.lower()

    if dex_id == ASTROPORT_DEX:
        return AstroportScraper(
            chain_client,
            factory_address=config.factory_address,
            page_size=config.page_size,
            timeout=config.timeout_seconds,
            session=session,
        )

    raise ValueError(f"Unsupported dex: {dex_id}")
