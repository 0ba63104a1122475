"""
ANS Scraper Exceptions - Custom exception hierarchy.

Asset-level errors (QueryFailedError, UnresolvableError) are caught by the
normalizer and recorded. Everything else aborts the run.
"""

from datetime import datetime
from typing import Any, Optional


class AnsScraperError(Exception):
    """Base exception for all scraper errors."""

    def __init__(
        self,
        message: str,
        chain: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.chain = chain
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "chain": self.chain,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.chain:
            parts.append(f"[chain={self.chain}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class FetchFailedError(AnsScraperError):
    """Remote fetch (chain registry, address directory) failed."""

    def __init__(
        self,
        message: str,
        chain: Optional[str] = None,
        status_code: Optional[int] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, chain, original_error, context)
        self.status_code = status_code
        self.request_url = request_url

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "request_url": self.request_url,
        })
        return data


class UnknownNetworkError(AnsScraperError):
    """Target network is not known or has no published DEX address."""

    def __init__(
        self,
        message: str,
        chain: Optional[str] = None,
        supported_networks: Optional[list[str]] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, chain, original_error, context)
        self.supported_networks = supported_networks or []

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["supported_networks"] = self.supported_networks
        return data


class QueryFailedError(AnsScraperError):
    """A chain query (contract smart query, denom trace) failed."""

    def __init__(
        self,
        message: str,
        chain: Optional[str] = None,
        address: Optional[str] = None,
        query: Optional[Any] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, chain, original_error, context)
        self.address = address
        self.query = query
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "address": self.address,
            "query": self.query,
            "status_code": self.status_code,
        })
        return data


class UnresolvableError(AnsScraperError):
    """An asset identifier could not be mapped to an ANS name."""

    def __init__(
        self,
        message: str,
        reason: Any,
        chain: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, chain, original_error, context)
        # UnresolvedReason; typed loosely to keep models free of this module
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["reason"] = getattr(self.reason, "value", self.reason)
        return data


class UnsupportedPoolTypeError(AnsScraperError):
    """A pool uses a pair type with no ANS pool type. Fatal."""

    def __init__(
        self,
        message: str,
        pool_id: Optional[str] = None,
        pair_type: Optional[str] = None,
        chain: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, chain, None, context)
        self.pool_id = pool_id
        self.pair_type = pair_type

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "pool_id": self.pool_id,
            "pair_type": self.pair_type,
        })
        return data


class CacheError(AnsScraperError):
    """Local registry cache could not be read or written."""

    def __init__(
        self,
        message: str,
        cache_path: Optional[str] = None,
        operation: str = "read",  # read, write
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, None, original_error, context)
        self.cache_path = cache_path
        self.operation = operation

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "cache_path": self.cache_path,
            "operation": self.operation,
        })
        return data


class ConfigurationError(AnsScraperError):
    """Invalid scraper configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, None, original_error, context)
        self.config_key = config_key

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["config_key"] = self.config_key
        return data
