"""
Resolvers package - Map raw asset identifiers to ANS names.
"""

from ans_scraper.resolvers.denom import TRANSFER_PORT, DenomResolver
from ans_scraper.resolvers.token import TOKEN_INFO_QUERY, TokenContractResolver


__all__ = [
    "DenomResolver",
    "TokenContractResolver",
    "TRANSFER_PORT",
    "TOKEN_INFO_QUERY",
]
