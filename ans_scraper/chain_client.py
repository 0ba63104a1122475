"""
Chain client - contract queries and IBC denom traces.

ChainClient is the interface the resolvers and pool sources depend on.
LcdChainClient implements it over the Cosmos LCD REST API.
"""

import base64
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from ans_scraper.exceptions import FetchFailedError, QueryFailedError
from ans_scraper.http_client import BaseHttpClient
from ans_scraper.models import DenomTrace
from ans_scraper.networks import NetworkInfo


logger = logging.getLogger(__name__)

IBC_DENOM_PREFIX = "ibc/"


class ChainClient(ABC):
    """Queries a single configured network."""

    @property
    @abstractmethod
    def chain_id(self) -> str:
        """Chain id of the target network."""
        pass

    @abstractmethod
    async def query_contract(self, address: str, query: dict[str, Any]) -> Any:
        """
        Run a smart query against a contract.

        Returns:
            The decoded query response

        Raises:
            QueryFailedError: If the contract cannot be queried
        """
        pass

    @abstractmethod
    async def denom_trace(self, denom: str) -> DenomTrace:
        """
        Look up the IBC transfer trace of a denomination.

        Raises:
            QueryFailedError: If the denom has no trace
        """
        pass


class LcdChainClient(BaseHttpClient, ChainClient):
    """ChainClient backed by a Cosmos LCD endpoint."""

    name = "lcd"

    def __init__(
        self,
        network: NetworkInfo,
        lcd_url: Optional[str] = None,
        timeout: float = BaseHttpClient.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(timeout=timeout, session=session)
        self._network = network
        self._lcd_url = (lcd_url or network.lcd_url).rstrip("/")

    @property
    def chain_id(self) -> str:
        return self._network.chain_id

    @property
    def network(self) -> NetworkInfo:
        return self._network

    @staticmethod
    def encode_query(query: dict[str, Any]) -> str:
        """Base64 + URL-encode a smart query message."""
        raw = json.dumps(query, separators=(",", ":")).encode()
        return quote(base64.b64encode(raw).decode(), safe="")

    async def query_contract(self, address: str, query: dict[str, Any]) -> Any:
        url = (
            f"{self._lcd_url}/cosmwasm/wasm/v1/contract/{address}"
            f"/smart/{self.encode_query(query)}"
        )
        try:
            response = await self._get_json(url)
        except FetchFailedError as e:
            raise QueryFailedError(
                message=f"Smart query failed: {e.message}",
                chain=self.chain_id,
                address=address,
                query=query,
                status_code=e.status_code,
                original_error=e,
            )

        if not isinstance(response, dict) or "data" not in response:
            raise QueryFailedError(
                message="Smart query response has no data",
                chain=self.chain_id,
                address=address,
                query=query,
            )
        return response["data"]

    async def denom_trace(self, denom: str) -> DenomTrace:
        if not denom.startswith(IBC_DENOM_PREFIX):
            raise QueryFailedError(
                message=f"{denom} is not an IBC denom",
                chain=self.chain_id,
                query={"denom_trace": denom},
            )

        trace_hash = denom[len(IBC_DENOM_PREFIX):]
        url = f"{self._lcd_url}/ibc/apps/transfer/v1/denom_traces/{trace_hash}"
        try:
            response = await self._get_json(url)
        except FetchFailedError as e:
            raise QueryFailedError(
                message=f"Denom trace lookup failed: {e.message}",
                chain=self.chain_id,
                query={"denom_trace": denom},
                status_code=e.status_code,
                original_error=e,
            )

        trace = response.get("denom_trace") if isinstance(response, dict) else None
        trace = trace or {}
        if "path" not in trace or not trace.get("base_denom"):
            raise QueryFailedError(
                message=f"Malformed denom trace for {denom}",
                chain=self.chain_id,
                query={"denom_trace": denom},
                context={"response": str(response)[:500]},
            )
        return DenomTrace(path=trace["path"], base_denom=trace["base_denom"])
