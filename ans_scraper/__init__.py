"""
ANS Scraper - DEX pool and asset discovery for the Asset Name Service.

Resolves every asset a DEX trades to a `chain>symbol` ANS name and rebuilds
the DEX's pools in terms of those names.

Quick Start:
    from ans_scraper import ScraperConfig, ScraperPipeline

    async def scrape():
        config = ScraperConfig(network_id="phoenix-1")
        async with ScraperPipeline(config) as pipeline:
            result = await pipeline.run()

        for name, identifier in result.resolved_assets.items():
            print(name, identifier)
        for pool in result.resolved_pools:
            print(pool.pool_id, pool.metadata.assets)
        for item in result.unresolved:
            print(item.identifier, item.reason.value)

Resolution:
- CW20 tokens: `<network prefix>><token symbol>` from the token_info query
- Native denoms: IBC denom trace -> base denom -> chain-registry asset list
  -> `<origin chain>><symbol>`

Pools referencing any unresolved asset are skipped, never emitted partially.
"""

from ans_scraper.chain_client import ChainClient, LcdChainClient
from ans_scraper.config import NameCollisionPolicy, ScraperConfig, TokenDiscriminator
from ans_scraper.dexes import AstroportScraper, DexScraper, create_dex_scraper
from ans_scraper.exceptions import (
    AnsScraperError,
    CacheError,
    ConfigurationError,
    FetchFailedError,
    QueryFailedError,
    UnknownNetworkError,
    UnresolvableError,
    UnsupportedPoolTypeError,
)
from ans_scraper.models import (
    ANS_SEPARATOR,
    AnsName,
    AssetIdentifier,
    ChainAsset,
    ChainAssetList,
    ContractToken,
    DenomTrace,
    DenomUnit,
    NativeDenom,
    NormalizationResult,
    PairType,
    PoolMetadata,
    PoolRecord,
    PoolType,
    RawPair,
    UnresolvedAsset,
    UnresolvedReason,
    ans_name,
)
from ans_scraper.networks import KNOWN_CHAINS, NETWORKS, NetworkInfo, parse_network
from ans_scraper.normalizer import AssetPoolNormalizer
from ans_scraper.pipeline import ScraperPipeline
from ans_scraper.registry_cache import ChainRegistryCache
from ans_scraper.resolvers import DenomResolver, TokenContractResolver


__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "ScraperPipeline",
    "ScraperConfig",
    "TokenDiscriminator",
    "NameCollisionPolicy",

    # Components
    "ChainClient",
    "LcdChainClient",
    "ChainRegistryCache",
    "DenomResolver",
    "TokenContractResolver",
    "DexScraper",
    "AstroportScraper",
    "create_dex_scraper",
    "AssetPoolNormalizer",

    # Networks
    "NetworkInfo",
    "NETWORKS",
    "KNOWN_CHAINS",
    "parse_network",

    # Models
    "ANS_SEPARATOR",
    "AnsName",
    "ans_name",
    "AssetIdentifier",
    "ContractToken",
    "NativeDenom",
    "DenomUnit",
    "ChainAsset",
    "ChainAssetList",
    "DenomTrace",
    "PairType",
    "PoolType",
    "RawPair",
    "PoolMetadata",
    "PoolRecord",
    "UnresolvedReason",
    "UnresolvedAsset",
    "NormalizationResult",

    # Exceptions
    "AnsScraperError",
    "FetchFailedError",
    "UnknownNetworkError",
    "QueryFailedError",
    "UnresolvableError",
    "UnsupportedPoolTypeError",
    "CacheError",
    "ConfigurationError",
]
