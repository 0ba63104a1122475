"""
Denomination Resolver - Native denom -> `chain>symbol` via IBC trace + registry.
"""

import logging
from typing import Optional

from ans_scraper.chain_client import ChainClient
from ans_scraper.exceptions import QueryFailedError, UnresolvableError
from ans_scraper.models import AnsName, UnresolvedReason, ans_name
from ans_scraper.registry_cache import ChainRegistryCache


logger = logging.getLogger(__name__)

TRANSFER_PORT = "transfer"


class DenomResolver:
    """
    Resolves native denominations to ANS names.

    The first segment of the denom's IBC trace must be the transfer port;
    nothing after it is checked. With `strict_trace_path`, the path must
    split into port/channel hops and every hop must use the transfer port.
    The base denom is then matched against the registry lists in cache
    order; the first match wins.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        registry: ChainRegistryCache,
        transfer_port: str = TRANSFER_PORT,
        strict_trace_path: bool = False,
    ) -> None:
        self._client = chain_client
        self._registry = registry
        self._transfer_port = transfer_port
        self._strict_trace_path = strict_trace_path

    async def resolve(self, denom: str) -> Optional[AnsName]:
        """Resolve `denom`, or None when it cannot be resolved."""
        try:
            return await self.resolve_or_raise(denom)
        except UnresolvableError as e:
            logger.debug(f"Denom {denom} unresolved: {e.message}")
            return None

    async def resolve_or_raise(self, denom: str) -> AnsName:
        """
        Resolve `denom` to an ANS name.

        Raises:
            UnresolvableError: With the UnresolvedReason that stopped resolution
        """
        try:
            trace = await self._client.denom_trace(denom)
        except QueryFailedError as e:
            raise UnresolvableError(
                f"No denom trace for {denom}",
                reason=UnresolvedReason.NO_DENOM_TRACE,
                chain=self._client.chain_id,
                original_error=e,
            )

        logger.info(f"Denom trace for {denom}: path={trace.path} base={trace.base_denom}")

        hops: list[tuple[str, str]] = []
        if self._strict_trace_path:
            try:
                hops = trace.hops()
            except ValueError as e:
                raise UnresolvableError(
                    f"Malformed trace path {trace.path!r} for {denom}",
                    reason=UnresolvedReason.MALFORMED_TRACE,
                    chain=self._client.chain_id,
                    original_error=e,
                )

        # Loose mode looks at the first segment only
        first_port = hops[0][0] if hops else trace.first_port()
        if not first_port:
            raise UnresolvableError(
                f"Empty trace path for {denom}",
                reason=UnresolvedReason.MALFORMED_TRACE,
                chain=self._client.chain_id,
            )

        if first_port != self._transfer_port:
            logger.warning(
                f"Denom trace path for {denom} is not {self._transfer_port}, but {first_port}"
            )
            raise UnresolvableError(
                f"Unsupported port {first_port!r} for {denom}",
                reason=UnresolvedReason.UNSUPPORTED_PORT,
                chain=self._client.chain_id,
            )

        if self._strict_trace_path:
            for port_id, channel_id in hops[1:]:
                if port_id != self._transfer_port:
                    logger.warning(
                        f"Denom trace path for {denom} routes through "
                        f"{port_id}/{channel_id}"
                    )
                    raise UnresolvableError(
                        f"Unsupported hop {port_id}/{channel_id} for {denom}",
                        reason=UnresolvedReason.MULTI_HOP_UNSUPPORTED,
                        chain=self._client.chain_id,
                    )

        base_denom = trace.base_denom
        logger.info(f"Base denom for {denom} is {base_denom}")

        for asset_list in self._registry.asset_lists:
            matching_asset = asset_list.find_by_denom(base_denom)
            if matching_asset is not None:
                return ans_name(asset_list.chain_name, matching_asset.symbol)

        raise UnresolvableError(
            f"No registry asset with denom {base_denom}",
            reason=UnresolvedReason.NOT_IN_REGISTRY,
            chain=self._client.chain_id,
            context={"base_denom": base_denom},
        )
