"""
ANS Scraper Data Models - Asset identifiers, registry lists, pools and results.

AssetIdentifier is a closed union of ContractToken and NativeDenom. Both are
frozen, so they hash by variant and payload and can be used as dedupe keys.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


ANS_SEPARATOR = ">"

# ANS names are plain strings of the form "<prefix>><symbol>"
AnsName = str


def ans_name(prefix: str, symbol: str) -> AnsName:
    """Build a canonical ANS name from a chain name/prefix and a symbol."""
    return f"{prefix.lower()}{ANS_SEPARATOR}{symbol.lower()}"


# ============================================================
# ASSET IDENTIFIERS
# ============================================================


@dataclass(frozen=True)
class ContractToken:
    """Fungible token identified by its issuing contract address."""
    address: str

    kind = "token"

    def to_wire(self) -> dict[str, Any]:
        """Astroport `AssetInfo` representation."""
        return {"token": {"contract_addr": self.address}}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "address": self.address}

    def __str__(self) -> str:
        return f"cw20:{self.address}"


@dataclass(frozen=True)
class NativeDenom:
    """Native currency identified by its on-chain denomination."""
    denom: str

    kind = "native"

    def to_wire(self) -> dict[str, Any]:
        """Astroport `AssetInfo` representation."""
        return {"native_token": {"denom": self.denom}}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "denom": self.denom}

    def __str__(self) -> str:
        return f"native:{self.denom}"


AssetIdentifier = Union[ContractToken, NativeDenom]


def asset_identifier_from_wire(data: dict[str, Any]) -> AssetIdentifier:
    """
    Parse an on-chain `AssetInfo` object.

    Raises:
        ValueError: If the object is neither a token nor a native token
    """
    if "token" in data:
        return ContractToken(address=data["token"]["contract_addr"])
    if "native_token" in data:
        return NativeDenom(denom=data["native_token"]["denom"])
    raise ValueError(f"Unknown asset info: {data}")


def asset_identifier_from_dict(data: dict[str, Any]) -> AssetIdentifier:
    """Inverse of `to_dict()` on either identifier variant."""
    kind = data.get("kind")
    if kind == ContractToken.kind:
        return ContractToken(address=data["address"])
    if kind == NativeDenom.kind:
        return NativeDenom(denom=data["denom"])
    raise ValueError(f"Unknown asset identifier kind: {kind!r}")


# ============================================================
# CHAIN REGISTRY
# ============================================================


@dataclass(frozen=True)
class DenomUnit:
    """One denomination unit of a registry asset."""
    denom: str
    exponent: int = 0
    aliases: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"denom": self.denom, "exponent": self.exponent}
        if self.aliases:
            data["aliases"] = list(self.aliases)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DenomUnit":
        return cls(
            denom=data["denom"],
            exponent=int(data.get("exponent", 0)),
            aliases=tuple(data.get("aliases") or ()),
        )


@dataclass(frozen=True)
class ChainAsset:
    """
    One asset row of a chain's registry list.

    Several alias denominations may refer to the same asset; lookups check
    all of them, not only the base denom.
    """
    symbol: str
    chain_name: str
    base: str = ""
    denom_units: tuple[DenomUnit, ...] = ()
    name: Optional[str] = None
    display: Optional[str] = None

    def all_denoms(self) -> list[str]:
        """Base denom plus every unit denom and alias, in declaration order."""
        denoms: list[str] = []
        if self.base:
            denoms.append(self.base)
        for unit in self.denom_units:
            denoms.append(unit.denom)
            denoms.extend(unit.aliases)
        return list(dict.fromkeys(denoms))

    def matches_denom(self, denom: str) -> bool:
        return denom in self.all_denoms()

    def ans_name(self) -> AnsName:
        return ans_name(self.chain_name, self.symbol)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "symbol": self.symbol,
            "base": self.base,
            "denom_units": [u.to_dict() for u in self.denom_units],
        }
        if self.name is not None:
            data["name"] = self.name
        if self.display is not None:
            data["display"] = self.display
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], chain_name: str) -> "ChainAsset":
        return cls(
            symbol=data.get("symbol", ""),
            chain_name=chain_name,
            base=data.get("base", ""),
            denom_units=tuple(DenomUnit.from_dict(u) for u in data.get("denom_units") or ()),
            name=data.get("name"),
            display=data.get("display"),
        )


@dataclass(frozen=True)
class ChainAssetList:
    """Ordered registry asset list of a single chain."""
    chain_name: str
    assets: tuple[ChainAsset, ...] = ()

    def find_by_denom(self, denom: str) -> Optional[ChainAsset]:
        """First asset with a symbol whose alias set contains `denom`."""
        for asset in self.assets:
            # No symbol means no usable ANS name
            if not asset.symbol.strip():
                continue
            if asset.matches_denom(denom):
                return asset
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain_name": self.chain_name,
            "assets": [a.to_dict() for a in self.assets],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChainAssetList":
        chain_name = data["chain_name"]
        return cls(
            chain_name=chain_name,
            assets=tuple(
                ChainAsset.from_dict(a, chain_name) for a in data.get("assets") or ()
            ),
        )


@dataclass(frozen=True)
class DenomTrace:
    """Inter-chain transfer trace of a native denomination."""
    path: str
    base_denom: str

    def hops(self) -> list[tuple[str, str]]:
        """
        Parse `path` into ordered (port_id, channel_id) pairs.

        Raises:
            ValueError: If the path does not split into pairs
        """
        if not self.path:
            return []
        segments = self.path.split("/")
        if len(segments) % 2 != 0:
            raise ValueError(f"Malformed trace path: {self.path!r}")
        return [(segments[i], segments[i + 1]) for i in range(0, len(segments), 2)]

    def first_port(self) -> str:
        """Port of the first path segment, "" for an empty path."""
        return self.path.split("/")[0]


# ============================================================
# POOLS
# ============================================================


class PairType(Enum):
    """DEX-neutral pair curve as reported by a pool source."""
    STABLE = "stable"
    CONSTANT_PRODUCT = "constant_product"
    CONCENTRATED = "concentrated"
    CUSTOM = "custom"


class PoolType(Enum):
    """ANS pool types."""
    STABLE = "Stable"
    CONSTANT_PRODUCT = "ConstantProduct"
    WEIGHTED = "Weighted"


@dataclass(frozen=True)
class RawPair:
    """A trading pair as read from a DEX factory, before resolution."""
    pool_id: str
    pair_type: PairType
    asset_infos: tuple[AssetIdentifier, ...]
    pair_type_label: str = ""
    liquidity_token: Optional[str] = None


@dataclass
class PoolMetadata:
    """ANS metadata of a pool. `assets` holds resolved names only."""
    dex: str
    pool_type: PoolType
    assets: list[AnsName] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dex": self.dex,
            "pool_type": self.pool_type.value,
            "assets": list(self.assets),
        }


@dataclass
class PoolRecord:
    pool_id: str
    metadata: PoolMetadata

    def to_dict(self) -> dict[str, Any]:
        return {"pool_id": self.pool_id, "metadata": self.metadata.to_dict()}


# ============================================================
# RESOLUTION RESULTS
# ============================================================


class UnresolvedReason(Enum):
    """Why an asset identifier has no ANS name."""
    QUERY_FAILED = "query_failed"
    NO_DENOM_TRACE = "no_denom_trace"
    UNSUPPORTED_PORT = "unsupported_port"
    MULTI_HOP_UNSUPPORTED = "multi_hop_unsupported"
    MALFORMED_TRACE = "malformed_trace"
    NOT_IN_REGISTRY = "not_in_registry"
    NAME_COLLISION = "name_collision"


@dataclass(frozen=True)
class UnresolvedAsset:
    identifier: AssetIdentifier
    reason: UnresolvedReason
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier.to_dict(),
            "reason": self.reason.value,
            "detail": self.detail,
        }


@dataclass
class NormalizationResult:
    """
    Output of one normalization run.

    Every identifier referenced by an input pool is either a value of
    `resolved_assets` or listed in `unresolved`, never both. Every input pool
    id is either in `resolved_pools` or in `skipped_pools`, never both.
    """
    resolved_assets: dict[AnsName, AssetIdentifier] = field(default_factory=dict)
    resolved_pools: list[PoolRecord] = field(default_factory=list)
    unresolved: list[UnresolvedAsset] = field(default_factory=list)
    skipped_pools: list[str] = field(default_factory=list)

    def summary(self) -> dict[str, int]:
        return {
            "resolved_assets": len(self.resolved_assets),
            "resolved_pools": len(self.resolved_pools),
            "unresolved_assets": len(self.unresolved),
            "skipped_pools": len(self.skipped_pools),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "resolved_assets": {
                name: identifier.to_dict()
                for name, identifier in self.resolved_assets.items()
            },
            "resolved_pools": [p.to_dict() for p in self.resolved_pools],
            "unresolved": [u.to_dict() for u in self.unresolved],
            "skipped_pools": list(self.skipped_pools),
        }
