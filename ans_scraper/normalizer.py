"""
Asset/Pool Normalizer - Resolves every pool asset and rebuilds pool metadata.

============================================================
FAILURE POLICY
============================================================
- Asset-level failures (query failed, unresolvable, name
  collision) are recorded in `unresolved`; the run continues.
- A pool with any unresolved asset is skipped whole.
- An unsupported pair type aborts the whole normalization
  before any asset is resolved.

============================================================
"""

import logging
from typing import Iterable

from ans_scraper.config import NameCollisionPolicy
from ans_scraper.exceptions import (
    QueryFailedError,
    UnresolvableError,
    UnsupportedPoolTypeError,
)
from ans_scraper.models import (
    AnsName,
    AssetIdentifier,
    ContractToken,
    NativeDenom,
    NormalizationResult,
    PairType,
    PoolMetadata,
    PoolRecord,
    PoolType,
    RawPair,
    UnresolvedAsset,
    UnresolvedReason,
)
from ans_scraper.resolvers.denom import DenomResolver
from ans_scraper.resolvers.token import TokenContractResolver


logger = logging.getLogger(__name__)


POOL_TYPES: dict[PairType, PoolType] = {
    PairType.STABLE: PoolType.STABLE,
    PairType.CONSTANT_PRODUCT: PoolType.CONSTANT_PRODUCT,
    PairType.CONCENTRATED: PoolType.WEIGHTED,
}


def pool_type_for(pair: RawPair) -> PoolType:
    """
    Map a pair's type to its ANS pool type.

    Raises:
        UnsupportedPoolTypeError: For custom or unknown pair types
    """
    try:
        return POOL_TYPES[pair.pair_type]
    except KeyError:
        raise UnsupportedPoolTypeError(
            f"Pair type {pair.pair_type_label or pair.pair_type.value} not supported",
            pool_id=pair.pool_id,
            pair_type=pair.pair_type_label or pair.pair_type.value,
        ) from None


class AssetPoolNormalizer:
    """
    Turns raw DEX pairs into an ANS asset table and pool list.

    Assets are resolved one at a time in first-seen order, so the result is
    deterministic for identical input and registry cache.

    Usage:
        normalizer = AssetPoolNormalizer("astroport", token_resolver, denom_resolver)
        result = await normalizer.normalize(pairs)
    """

    def __init__(
        self,
        dex_id: str,
        token_resolver: TokenContractResolver,
        denom_resolver: DenomResolver,
        collision_policy: NameCollisionPolicy = NameCollisionPolicy.OVERWRITE,
    ) -> None:
        self._dex_id = dex_id
        self._token_resolver = token_resolver
        self._denom_resolver = denom_resolver
        self._collision_policy = collision_policy

    async def normalize(self, pairs: Iterable[RawPair]) -> NormalizationResult:
        """
        Resolve all assets of `pairs` and build the pool records.

        Raises:
            UnsupportedPoolTypeError: If any pair has an unsupported type
        """
        pairs = list(pairs)
        # Every pair is validated; the first occurrence of a pool id is the one emitted
        pool_types: dict[str, PoolType] = {}
        for pair in pairs:
            pool_types.setdefault(pair.pool_id, pool_type_for(pair))

        unique_assets = list(dict.fromkeys(
            asset_info for pair in pairs for asset_info in pair.asset_infos
        ))
        logger.info(
            f"[{self._dex_id}] Normalizing {len(pairs)} pools with "
            f"{len(unique_assets)} unique assets"
        )

        result = NormalizationResult()
        names = await self._resolve_assets(unique_assets, result)

        seen_pools: set[str] = set()
        for pair in pairs:
            if pair.pool_id in seen_pools:
                continue
            seen_pools.add(pair.pool_id)

            assets: list[AnsName] = []
            for asset_info in pair.asset_infos:
                name = names.get(asset_info)
                if name is None:
                    break
                assets.append(name)
            else:
                result.resolved_pools.append(PoolRecord(
                    pool_id=pair.pool_id,
                    metadata=PoolMetadata(
                        dex=self._dex_id,
                        pool_type=pool_types[pair.pool_id],
                        assets=assets,
                    ),
                ))
                continue

            logger.debug(f"[{self._dex_id}] Skipping pool {pair.pool_id}: unresolved asset")
            result.skipped_pools.append(pair.pool_id)

        logger.info(f"[{self._dex_id}] Normalization done: {result.summary()}")
        return result

    async def _resolve_assets(
        self,
        identifiers: list[AssetIdentifier],
        result: NormalizationResult,
    ) -> dict[AssetIdentifier, AnsName]:
        """Fill `result.resolved_assets` / `result.unresolved`; return identifier -> name."""
        names: dict[AssetIdentifier, AnsName] = {}

        for identifier in identifiers:
            try:
                name = await self._resolve(identifier)
            except QueryFailedError as e:
                logger.warning(f"[{self._dex_id}] Query failed for {identifier}: {e.message}")
                result.unresolved.append(
                    UnresolvedAsset(identifier, UnresolvedReason.QUERY_FAILED, e.message)
                )
                continue
            except UnresolvableError as e:
                logger.info(f"[{self._dex_id}] Unresolvable {identifier}: {e.message}")
                result.unresolved.append(UnresolvedAsset(identifier, e.reason, e.message))
                continue

            existing = result.resolved_assets.get(name)
            if existing is not None:
                if self._collision_policy == NameCollisionPolicy.REPORT:
                    logger.warning(
                        f"[{self._dex_id}] {identifier} resolves to {name}, "
                        f"already claimed by {existing}"
                    )
                    result.unresolved.append(UnresolvedAsset(
                        identifier,
                        UnresolvedReason.NAME_COLLISION,
                        f"{name} already claimed by {existing}",
                    ))
                    continue

                logger.warning(f"[{self._dex_id}] {identifier} overwrites {existing} as {name}")
                del names[existing]
                result.unresolved.append(UnresolvedAsset(
                    existing,
                    UnresolvedReason.NAME_COLLISION,
                    f"{name} overwritten by {identifier}",
                ))

            result.resolved_assets[name] = identifier
            names[identifier] = name

        return names

    async def _resolve(self, identifier: AssetIdentifier) -> AnsName:
        if isinstance(identifier, ContractToken):
            return await self._token_resolver.resolve(identifier.address)
        if isinstance(identifier, NativeDenom):
            return await self._denom_resolver.resolve_or_raise(identifier.denom)
        raise TypeError(f"Unknown asset identifier: {identifier!r}")
