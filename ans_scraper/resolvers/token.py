"""
Token Contract Resolver - CW20 contract address -> `prefix>symbol`.
"""

import logging
from typing import Optional

from ans_scraper.chain_client import ChainClient
from ans_scraper.config import TokenDiscriminator
from ans_scraper.exceptions import QueryFailedError
from ans_scraper.models import AnsName, ans_name


logger = logging.getLogger(__name__)

TOKEN_INFO_QUERY = {"token_info": {}}


class TokenContractResolver:
    """
    Resolves CW20 token contracts through their `token_info` query.

    A single failed query is final for that token; there is no retry.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        default_prefix: str,
        discriminator: TokenDiscriminator = TokenDiscriminator.SYMBOL,
    ) -> None:
        self._client = chain_client
        self._default_prefix = default_prefix
        self._discriminator = discriminator

    async def resolve(
        self,
        contract_address: str,
        name_prefix: Optional[str] = None,
    ) -> AnsName:
        """
        Resolve a token contract to an ANS name.

        Args:
            contract_address: CW20 contract address
            name_prefix: ANS prefix, defaults to the network's prefix

        Raises:
            QueryFailedError: If the contract cannot be queried or its
                token info lacks the discriminator field
        """
        token_info = await self._client.query_contract(contract_address, TOKEN_INFO_QUERY)

        field_name = self._discriminator.value
        value = token_info.get(field_name) if isinstance(token_info, dict) else None
        if not isinstance(value, str) or not value.strip():
            raise QueryFailedError(
                f"Token info of {contract_address} has no {field_name}",
                chain=self._client.chain_id,
                address=contract_address,
                query=TOKEN_INFO_QUERY,
            )

        name = ans_name(name_prefix or self._default_prefix, value.strip())
        logger.debug(f"Token {contract_address} resolved to {name}")
        return name
