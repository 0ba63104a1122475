"""
Scraper pipeline - wires config, chain client, registry, resolvers and DEX.

One pipeline instance is one run: it owns the HTTP session and the registry
cache handle, and everything runs sequentially.
"""

import logging
from typing import Optional

import aiohttp

from ans_scraper.chain_client import ChainClient, LcdChainClient
from ans_scraper.config import ScraperConfig
from ans_scraper.dexes.base import DexScraper
from ans_scraper.dexes.factory import create_dex_scraper
from ans_scraper.models import NormalizationResult
from ans_scraper.networks import NETWORKS, NetworkInfo, parse_network
from ans_scraper.normalizer import AssetPoolNormalizer
from ans_scraper.registry_cache import ChainRegistryCache
from ans_scraper.resolvers.denom import DenomResolver
from ans_scraper.resolvers.token import TokenContractResolver


logger = logging.getLogger(__name__)


class ScraperPipeline:
    """
    Runs one ANS scrape for one DEX on one network.

    Usage:
        async with ScraperPipeline(ScraperConfig.from_env()) as pipeline:
            result = await pipeline.run()

    Collaborators may be injected for tests; anything not injected is built
    from the config on first use.
    """

    def __init__(
        self,
        config: ScraperConfig,
        chain_client: Optional[ChainClient] = None,
        registry: Optional[ChainRegistryCache] = None,
        dex_scraper: Optional[DexScraper] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        config.validate()
        self._config = config
        self._session = session
        self._owns_session = session is None
        self._chain_client = chain_client
        self._registry = registry
        self._dex_scraper = dex_scraper

    @property
    def config(self) -> ScraperConfig:
        return self._config

    def _network(self) -> NetworkInfo:
        if self._config.network_id in NETWORKS:
            return parse_network(self._config.network_id)
        # Custom network: config.validate() guarantees an explicit lcd_url
        return NetworkInfo(
            chain_id=self._config.network_id,
            chain_name=self._config.ans_prefix or self._config.network_id,
            ans_prefix=self._config.ans_prefix or self._config.network_id,
            lcd_url=self._config.lcd_url,
        )

    def ans_prefix(self) -> str:
        return self._config.ans_prefix or self._network().ans_prefix

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_seconds),
            )
            self._owns_session = True
        return self._session

    async def _build(self) -> None:
        session = None
        if self._chain_client is None or self._registry is None or self._dex_scraper is None:
            session = await self._get_session()

        if self._chain_client is None:
            self._chain_client = LcdChainClient(
                self._network(),
                lcd_url=self._config.lcd_url,
                timeout=self._config.timeout_seconds,
                session=session,
            )
        if self._registry is None:
            self._registry = ChainRegistryCache(
                self._config.cache_dir,
                self._config.registry_base_url,
                timeout=self._config.timeout_seconds,
                session=session,
            )
        if self._dex_scraper is None:
            self._dex_scraper = create_dex_scraper(
                self._config.dex,
                self._chain_client,
                self._config,
                session=session,
            )

    async def run(self) -> NormalizationResult:
        """
        Execute the scrape.

        Raises:
            AnsScraperError: On any fatal error; no partial result is returned
        """
        await self._build()
        config = self._config
        logger.info(
            f"Starting ANS scrape: dex={config.dex} network={config.network_id}"
        )

        await self._registry.load(config.chains)

        denom_resolver = DenomResolver(
            self._chain_client,
            self._registry,
            transfer_port=config.transfer_port,
            strict_trace_path=config.strict_trace_path,
        )
        token_resolver = TokenContractResolver(
            self._chain_client,
            default_prefix=self.ans_prefix(),
            discriminator=config.token_discriminator,
        )
        normalizer = AssetPoolNormalizer(
            self._dex_scraper.dex_id,
            token_resolver,
            denom_resolver,
            collision_policy=config.name_collision_policy,
        )

        pairs = await self._dex_scraper.fetch_pools()
        return await normalizer.normalize(pairs)

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "ScraperPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
