"""
DEX package - Pool sources for supported DEXes.
"""

from ans_scraper.dexes.astroport import (
    ASTROPORT_DEX,
    AstroportScraper,
    parse_address_directory,
    parse_pair,
)
from ans_scraper.dexes.base import DexScraper
from ans_scraper.dexes.factory import SUPPORTED_DEXES, create_dex_scraper, list_supported


__all__ = [
    "DexScraper",
    "AstroportScraper",
    "ASTROPORT_DEX",
    "SUPPORTED_DEXES",
    "create_dex_scraper",
    "list_supported",
    "parse_address_directory",
    "parse_pair",
]
