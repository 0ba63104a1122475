"""
ANS Scraper - Configuration.

============================================================
CONFIGURATION SOURCES
============================================================

Configuration can be loaded from:
- Default values
- Environment variables (ANS_*, .env supported)
- YAML config file

CLI flags are applied on top by the caller.

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from ans_scraper.exceptions import ConfigurationError
from ans_scraper.networks import KNOWN_CHAINS, NETWORKS


logger = logging.getLogger(__name__)


DEFAULT_REGISTRY_BASE_URL = "https://raw.githubusercontent.com/cosmos/chain-registry/master"
DEFAULT_CACHE_DIR = Path("cache/asset_lists")


class TokenDiscriminator(Enum):
    """Token metadata field used as the ANS name suffix of CW20 tokens."""
    SYMBOL = "symbol"
    NAME = "name"


class NameCollisionPolicy(Enum):
    """What to do when two identifiers resolve to the same ANS name."""
    REPORT = "report"        # keep the first, report the later one as unresolved
    OVERWRITE = "overwrite"  # last write wins


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ScraperConfig:
    """
    Main configuration for an ANS scrape run.
    """
    # Target network
    network_id: str = "phoenix-1"
    lcd_url: Optional[str] = None          # overrides the network default
    ans_prefix: Optional[str] = None       # overrides the network default

    # DEX
    dex: str = "astroport"
    factory_address: Optional[str] = None  # skips the address directory lookup
    page_size: Optional[int] = None        # None lets the factory pick

    # Chain registry
    cache_dir: Path = DEFAULT_CACHE_DIR
    registry_base_url: str = DEFAULT_REGISTRY_BASE_URL
    chains: list[str] = field(default_factory=lambda: list(KNOWN_CHAINS))

    # Resolution
    token_discriminator: TokenDiscriminator = TokenDiscriminator.SYMBOL
    name_collision_policy: NameCollisionPolicy = NameCollisionPolicy.OVERWRITE
    strict_trace_path: bool = False        # True checks every hop, not just the first
    transfer_port: str = "transfer"

    # Transport
    timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: On the first invalid value
        """
        if not self.network_id:
            raise ConfigurationError("network_id must be set", config_key="network_id")
        if self.lcd_url is None and self.network_id not in NETWORKS:
            raise ConfigurationError(
                f"No LCD endpoint known for {self.network_id!r}; set lcd_url",
                config_key="lcd_url",
            )
        if self.page_size is not None and self.page_size < 1:
            raise ConfigurationError("page_size must be positive", config_key="page_size")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                "timeout_seconds must be positive", config_key="timeout_seconds"
            )
        if not self.chains:
            raise ConfigurationError("chains must not be empty", config_key="chains")
        if not self.transfer_port:
            raise ConfigurationError("transfer_port must be set", config_key="transfer_port")

    @classmethod
    def from_env(cls) -> "ScraperConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - ANS_NETWORK_ID
        - ANS_LCD_URL
        - ANS_PREFIX
        - ANS_DEX
        - ANS_FACTORY_ADDRESS
        - ANS_PAGE_SIZE
        - ANS_CACHE_DIR
        - ANS_REGISTRY_BASE_URL
        - ANS_CHAINS (comma separated)
        - ANS_TOKEN_DISCRIMINATOR (symbol|name)
        - ANS_NAME_COLLISION_POLICY (report|overwrite)
        - ANS_STRICT_TRACE_PATH
        - ANS_TRANSFER_PORT
        - ANS_TIMEOUT_SECONDS
        - ANS_LOG_LEVEL
        """
        load_dotenv()
        config = cls()

        if os.getenv("ANS_NETWORK_ID"):
            config.network_id = os.getenv("ANS_NETWORK_ID")
        if os.getenv("ANS_LCD_URL"):
            config.lcd_url = os.getenv("ANS_LCD_URL")
        if os.getenv("ANS_PREFIX"):
            config.ans_prefix = os.getenv("ANS_PREFIX")
        if os.getenv("ANS_DEX"):
            config.dex = os.getenv("ANS_DEX")
        if os.getenv("ANS_FACTORY_ADDRESS"):
            config.factory_address = os.getenv("ANS_FACTORY_ADDRESS")
        if os.getenv("ANS_PAGE_SIZE"):
            config.page_size = int(os.getenv("ANS_PAGE_SIZE"))

        if os.getenv("ANS_CACHE_DIR"):
            config.cache_dir = Path(os.getenv("ANS_CACHE_DIR"))
        if os.getenv("ANS_REGISTRY_BASE_URL"):
            config.registry_base_url = os.getenv("ANS_REGISTRY_BASE_URL")
        if os.getenv("ANS_CHAINS"):
            config.chains = [c.strip() for c in os.getenv("ANS_CHAINS").split(",") if c.strip()]

        if os.getenv("ANS_TOKEN_DISCRIMINATOR"):
            config.token_discriminator = TokenDiscriminator(os.getenv("ANS_TOKEN_DISCRIMINATOR"))
        if os.getenv("ANS_NAME_COLLISION_POLICY"):
            config.name_collision_policy = NameCollisionPolicy(
                os.getenv("ANS_NAME_COLLISION_POLICY")
            )
        if os.getenv("ANS_STRICT_TRACE_PATH"):
            config.strict_trace_path = _env_bool(os.getenv("ANS_STRICT_TRACE_PATH"))
        if os.getenv("ANS_TRANSFER_PORT"):
            config.transfer_port = os.getenv("ANS_TRANSFER_PORT")

        if os.getenv("ANS_TIMEOUT_SECONDS"):
            config.timeout_seconds = float(os.getenv("ANS_TIMEOUT_SECONDS"))
        if os.getenv("ANS_LOG_LEVEL"):
            config.log_level = os.getenv("ANS_LOG_LEVEL").upper()

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "ScraperConfig":
        """Load configuration from YAML file."""
        import yaml

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config from {path}",
                original_error=e,
            )

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScraperConfig":
        """Create config from a plain mapping; unknown keys are rejected."""
        config = cls()
        for key, value in data.items():
            if not hasattr(config, key):
                raise ConfigurationError(f"Unknown config key: {key}", config_key=key)
            setattr(config, key, value)

        # Coerce the typed fields
        config.cache_dir = Path(config.cache_dir)
        config.chains = list(config.chains)
        config.token_discriminator = TokenDiscriminator(
            getattr(config.token_discriminator, "value", config.token_discriminator)
        )
        config.name_collision_policy = NameCollisionPolicy(
            getattr(config.name_collision_policy, "value", config.name_collision_policy)
        )
        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "network_id": self.network_id,
            "lcd_url": self.lcd_url,
            "ans_prefix": self.ans_prefix,
            "dex": self.dex,
            "factory_address": self.factory_address,
            "page_size": self.page_size,
            "cache_dir": str(self.cache_dir),
            "registry_base_url": self.registry_base_url,
            "chains": list(self.chains),
            "token_discriminator": self.token_discriminator.value,
            "name_collision_policy": self.name_collision_policy.value,
            "strict_trace_path": self.strict_trace_path,
            "transfer_port": self.transfer_port,
            "timeout_seconds": self.timeout_seconds,
            "log_level": self.log_level,
        }
