"""
Tests for the Asset/Pool Normalizer.

============================================================
PURPOSE
============================================================
Covers:
1. Asset table and pool record construction
2. Pool skipping on unresolved assets
3. Unsupported pair types aborting the run
4. Name collision handling
5. Determinism and deduplication

============================================================
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from ans_scraper.chain_client import LcdChainClient
from ans_scraper.config import NameCollisionPolicy, ScraperConfig
from ans_scraper.exceptions import QueryFailedError, UnresolvableError, UnsupportedPoolTypeError
from ans_scraper.models import (
    ContractToken,
    NativeDenom,
    PairType,
    PoolType,
    RawPair,
    UnresolvedReason,
)
from ans_scraper.networks import PHOENIX_1
from ans_scraper.normalizer import AssetPoolNormalizer, pool_type_for
from ans_scraper.resolvers.denom import DenomResolver
from ans_scraper.resolvers.token import TokenContractResolver


ASTRO = ContractToken("terra1astro")
XASTRO = ContractToken("terra1xastro")
BROKEN = ContractToken("terra1broken")
LUNA = NativeDenom("uluna")
ATOM = NativeDenom("ibc/ATOM")
ICA = NativeDenom("ibc/ICA")


# ============================================================
# FIXTURES
# ============================================================

def make_token_resolver(names):
    """Token resolver answering from {address: name}; others fail to query."""
    async def resolve(address, name_prefix=None):
        if address not in names:
            raise QueryFailedError(f"Token info query failed for {address}", address=address)
        return names[address]

    resolver = MagicMock(spec=TokenContractResolver)
    resolver.resolve = AsyncMock(side_effect=resolve)
    return resolver


def make_denom_resolver(names):
    """Denom resolver answering from {denom: name}; others are not in the registry."""
    async def resolve_or_raise(denom):
        if denom not in names:
            raise UnresolvableError(
                f"{denom} not found in any asset list",
                reason=UnresolvedReason.NOT_IN_REGISTRY,
            )
        return names[denom]

    resolver = MagicMock(spec=DenomResolver)
    resolver.resolve_or_raise = AsyncMock(side_effect=resolve_or_raise)
    return resolver


def pair(pool_id, *assets, pair_type=PairType.CONSTANT_PRODUCT, label=""):
    return RawPair(pool_id=pool_id, pair_type=pair_type, asset_infos=assets, pair_type_label=label)


@pytest.fixture
def token_resolver():
    return make_token_resolver({
        "terra1astro": "terra2>astro",
        "terra1xastro": "terra2>xastro",
    })


@pytest.fixture
def denom_resolver():
    return make_denom_resolver({
        "uluna": "terra2>luna",
        "ibc/ATOM": "cosmoshub>atom",
    })


@pytest.fixture
def normalizer(token_resolver, denom_resolver):
    return AssetPoolNormalizer("astroport", token_resolver, denom_resolver)


# ============================================================
# BASIC NORMALIZATION TESTS
# ============================================================

class TestNormalize:
    """Tests for the happy path."""

    @pytest.mark.asyncio
    async def test_empty_input(self, normalizer):
        result = await normalizer.normalize([])

        assert result.resolved_assets == {}
        assert result.resolved_pools == []
        assert result.unresolved == []
        assert result.skipped_pools == []

    @pytest.mark.asyncio
    async def test_builds_assets_and_pools(self, normalizer):
        result = await normalizer.normalize([
            pair("terra1pool1", LUNA, ASTRO),
            pair("terra1pool2", ATOM, LUNA, pair_type=PairType.STABLE),
        ])

        assert result.resolved_assets == {
            "terra2>luna": LUNA,
            "terra2>astro": ASTRO,
            "cosmoshub>atom": ATOM,
        }
        assert [p.pool_id for p in result.resolved_pools] == ["terra1pool1", "terra1pool2"]

        first, second = result.resolved_pools
        assert first.metadata.dex == "astroport"
        assert first.metadata.pool_type == PoolType.CONSTANT_PRODUCT
        assert first.metadata.assets == ["terra2>luna", "terra2>astro"]
        assert second.metadata.pool_type == PoolType.STABLE
        assert second.metadata.assets == ["cosmoshub>atom", "terra2>luna"]

    @pytest.mark.asyncio
    async def test_tag_separation(self):
        """A token and a denom with the same string are distinct assets."""
        token_resolver = make_token_resolver({"shared": "terra2>tok"})
        denom_resolver = make_denom_resolver({"shared": "cosmoshub>den"})
        normalizer = AssetPoolNormalizer("astroport", token_resolver, denom_resolver)

        result = await normalizer.normalize([
            pair("terra1pool", ContractToken("shared"), NativeDenom("shared")),
        ])

        assert result.resolved_assets == {
            "terra2>tok": ContractToken("shared"),
            "cosmoshub>den": NativeDenom("shared"),
        }
        token_resolver.resolve.assert_awaited_once_with("shared")
        denom_resolver.resolve_or_raise.assert_awaited_once_with("shared")

    @pytest.mark.asyncio
    async def test_each_asset_resolved_once(self, normalizer, token_resolver, denom_resolver):
        """Assets shared by many pools are resolved a single time."""
        await normalizer.normalize([
            pair("terra1pool1", LUNA, ASTRO),
            pair("terra1pool2", LUNA, ATOM),
            pair("terra1pool3", ASTRO, ATOM),
        ])

        assert token_resolver.resolve.await_count == 1
        assert denom_resolver.resolve_or_raise.await_count == 2

    @pytest.mark.asyncio
    async def test_duplicate_pool_id_emitted_once(self, normalizer):
        result = await normalizer.normalize([
            pair("terra1pool1", LUNA, ASTRO),
            pair("terra1pool1", LUNA, ASTRO),
        ])

        assert [p.pool_id for p in result.resolved_pools] == ["terra1pool1"]

    @pytest.mark.asyncio
    async def test_duplicate_pool_id_keeps_first_type(self, normalizer):
        """The emitted occurrence carries its own pool type."""
        result = await normalizer.normalize([
            pair("terra1pool1", LUNA, ASTRO, pair_type=PairType.STABLE),
            pair("terra1pool1", LUNA, ATOM, pair_type=PairType.CONSTANT_PRODUCT),
        ])

        (pool,) = result.resolved_pools
        assert pool.metadata.pool_type == PoolType.STABLE
        assert pool.metadata.assets == ["terra2>luna", "terra2>astro"]

    @pytest.mark.asyncio
    async def test_duplicate_pool_id_still_validated(self, normalizer):
        """A custom pair type on a later duplicate still aborts."""
        with pytest.raises(UnsupportedPoolTypeError):
            await normalizer.normalize([
                pair("terra1pool1", LUNA, ASTRO),
                pair("terra1pool1", LUNA, ASTRO, pair_type=PairType.CUSTOM, label="custom:x"),
            ])

    @pytest.mark.asyncio
    async def test_idempotent(self, normalizer):
        """The same input gives the same output."""
        pairs = [pair("terra1pool1", LUNA, ASTRO), pair("terra1pool2", ICA, LUNA)]

        first = await normalizer.normalize(pairs)
        second = await normalizer.normalize(pairs)

        assert first.to_dict() == second.to_dict()


# ============================================================
# POOL TYPE TESTS
# ============================================================

class TestPoolTypes:
    """Tests for pair type mapping."""

    @pytest.mark.parametrize("pair_type,expected", [
        (PairType.STABLE, PoolType.STABLE),
        (PairType.CONSTANT_PRODUCT, PoolType.CONSTANT_PRODUCT),
        (PairType.CONCENTRATED, PoolType.WEIGHTED),
    ])
    def test_mapping(self, pair_type, expected):
        assert pool_type_for(pair("terra1pool", LUNA, ASTRO, pair_type=pair_type)) == expected

    def test_custom_unsupported(self):
        with pytest.raises(UnsupportedPoolTypeError) as exc_info:
            pool_type_for(pair(
                "terra1pool", LUNA, ASTRO, pair_type=PairType.CUSTOM, label="custom:transmuter"
            ))

        assert exc_info.value.pool_id == "terra1pool"
        assert exc_info.value.pair_type == "custom:transmuter"

    @pytest.mark.asyncio
    async def test_custom_pool_aborts_before_resolution(
        self, normalizer, token_resolver, denom_resolver
    ):
        """One custom pool aborts the whole run with no partial result."""
        pairs = [
            pair("terra1pool1", LUNA, ASTRO),
            pair("terra1pool2", LUNA, ATOM, pair_type=PairType.CUSTOM, label="custom:x"),
        ]

        with pytest.raises(UnsupportedPoolTypeError):
            await normalizer.normalize(pairs)

        token_resolver.resolve.assert_not_called()
        denom_resolver.resolve_or_raise.assert_not_called()


# ============================================================
# UNRESOLVED ASSET TESTS
# ============================================================

class TestUnresolved:
    """Tests for asset-level failures."""

    @pytest.mark.asyncio
    async def test_pools_with_failed_asset_are_skipped(self, normalizer):
        """Two pools sharing a resolved asset, each with one failing asset."""
        result = await normalizer.normalize([
            pair("terra1pool1", LUNA, BROKEN),
            pair("terra1pool2", LUNA, ICA),
        ])

        assert result.skipped_pools == ["terra1pool1", "terra1pool2"]
        assert result.resolved_pools == []
        assert result.resolved_assets == {"terra2>luna": LUNA}

    @pytest.mark.asyncio
    async def test_failure_reasons(self, normalizer):
        result = await normalizer.normalize([pair("terra1pool1", BROKEN, ICA)])

        reasons = {u.identifier: u.reason for u in result.unresolved}
        assert reasons == {
            BROKEN: UnresolvedReason.QUERY_FAILED,
            ICA: UnresolvedReason.NOT_IN_REGISTRY,
        }

    @pytest.mark.asyncio
    async def test_every_asset_accounted_for_once(self, normalizer):
        """Each identifier is either resolved or unresolved, never both."""
        pairs = [
            pair("terra1pool1", LUNA, BROKEN),
            pair("terra1pool2", ATOM, ICA),
            pair("terra1pool3", ASTRO, LUNA),
        ]
        result = await normalizer.normalize(pairs)

        resolved = set(result.resolved_assets.values())
        unresolved = [u.identifier for u in result.unresolved]
        everything = {a for p in pairs for a in p.asset_infos}

        assert resolved.isdisjoint(unresolved)
        assert len(unresolved) == len(set(unresolved))
        assert resolved | set(unresolved) == everything

    @pytest.mark.asyncio
    async def test_pools_resolved_or_skipped(self, normalizer):
        pairs = [
            pair("terra1pool1", LUNA, BROKEN),
            pair("terra1pool2", ATOM, ASTRO),
        ]
        result = await normalizer.normalize(pairs)

        resolved_ids = {p.pool_id for p in result.resolved_pools}
        assert resolved_ids.isdisjoint(result.skipped_pools)
        assert resolved_ids | set(result.skipped_pools) == {"terra1pool1", "terra1pool2"}
        for pool in result.resolved_pools:
            assert all(name in result.resolved_assets for name in pool.metadata.assets)

    @pytest.mark.asyncio
    async def test_timed_out_token_query_is_unresolved(self, denom_resolver):
        """A token query hitting the transport timeout does not abort the run."""
        session = MagicMock()
        session.closed = False
        session.request.return_value.__aenter__ = AsyncMock(side_effect=asyncio.TimeoutError())
        session.request.return_value.__aexit__ = AsyncMock(return_value=False)
        client = LcdChainClient(PHOENIX_1, session=session)
        normalizer = AssetPoolNormalizer(
            "astroport",
            TokenContractResolver(client, default_prefix="terra2"),
            denom_resolver,
        )
        slow = ContractToken("terra1slow")

        result = await normalizer.normalize([pair("terra1pool1", slow)])

        assert [(u.identifier, u.reason) for u in result.unresolved] == [
            (slow, UnresolvedReason.QUERY_FAILED),
        ]
        assert result.skipped_pools == ["terra1pool1"]
        assert result.resolved_pools == []


# ============================================================
# NAME COLLISION TESTS
# ============================================================

class TestNameCollision:
    """Two identifiers resolving to one ANS name."""

    @pytest.fixture
    def colliding_resolvers(self):
        token_resolver = make_token_resolver({
            "terra1astro": "terra2>astro",
            "terra1fake": "terra2>astro",
        })
        denom_resolver = make_denom_resolver({"uluna": "terra2>luna"})
        return token_resolver, denom_resolver

    @pytest.mark.asyncio
    async def test_report_keeps_first(self, colliding_resolvers):
        normalizer = AssetPoolNormalizer(
            "astroport", *colliding_resolvers, collision_policy=NameCollisionPolicy.REPORT
        )

        result = await normalizer.normalize([
            pair("terra1pool1", LUNA, ASTRO),
            pair("terra1pool2", LUNA, ContractToken("terra1fake")),
        ])

        assert result.resolved_assets["terra2>astro"] == ASTRO
        assert [u.reason for u in result.unresolved] == [UnresolvedReason.NAME_COLLISION]
        assert result.unresolved[0].identifier == ContractToken("terra1fake")
        assert [p.pool_id for p in result.resolved_pools] == ["terra1pool1"]
        assert result.skipped_pools == ["terra1pool2"]

    @pytest.mark.asyncio
    async def test_overwrite_keeps_last(self, colliding_resolvers):
        normalizer = AssetPoolNormalizer(
            "astroport", *colliding_resolvers, collision_policy=NameCollisionPolicy.OVERWRITE
        )

        result = await normalizer.normalize([
            pair("terra1pool1", LUNA, ASTRO),
            pair("terra1pool2", LUNA, ContractToken("terra1fake")),
        ])

        assert result.resolved_assets["terra2>astro"] == ContractToken("terra1fake")
        assert result.unresolved[0].identifier == ASTRO
        assert result.unresolved[0].reason == UnresolvedReason.NAME_COLLISION
        assert [p.pool_id for p in result.resolved_pools] == ["terra1pool2"]
        assert result.skipped_pools == ["terra1pool1"]

    @pytest.mark.asyncio
    async def test_default_config_last_write_wins(self):
        """Out of the box the later identifier takes the name."""
        token_resolver = make_token_resolver({
            "terra1a": "terra2>usdc",
            "terra1b": "terra2>usdc",
        })
        normalizer = AssetPoolNormalizer(
            "astroport",
            token_resolver,
            make_denom_resolver({}),
            collision_policy=ScraperConfig().name_collision_policy,
        )

        result = await normalizer.normalize([
            pair("terra1pool1", ContractToken("terra1a")),
            pair("terra1pool2", ContractToken("terra1b")),
        ])

        assert result.resolved_assets == {"terra2>usdc": ContractToken("terra1b")}

    @pytest.mark.asyncio
    async def test_normalizer_default_is_last_write_wins(self, colliding_resolvers):
        normalizer = AssetPoolNormalizer("astroport", *colliding_resolvers)

        result = await normalizer.normalize([
            pair("terra1pool1", LUNA, ASTRO),
            pair("terra1pool2", LUNA, ContractToken("terra1fake")),
        ])

        assert result.resolved_assets["terra2>astro"] == ContractToken("terra1fake")
