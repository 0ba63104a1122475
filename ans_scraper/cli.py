"""
ANS Scraper - CLI.

============================================================
USAGE
============================================================
python -m ans_scraper --network-id phoenix-1
python -m ans_scraper --network-id pisco-1 --output pisco.json
python -m ans_scraper --config scraper.yaml --token-discriminator name

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ans_scraper.config import NameCollisionPolicy, ScraperConfig, TokenDiscriminator
from ans_scraper.dexes.factory import list_supported
from ans_scraper.exceptions import AnsScraperError
from ans_scraper.models import NormalizationResult
from ans_scraper.networks import NETWORKS
from ans_scraper.pipeline import ScraperPipeline


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ans-scraper",
        description="Resolve DEX pools and assets into Asset Name Service entries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Known networks: {", ".join(sorted(NETWORKS))}
Supported DEXes: {", ".join(list_supported())}

Settings not given on the command line come from ANS_* environment
variables (a .env file is honoured) or from --config.
        """,
    )

    parser.add_argument(
        "--network-id", "-n",
        type=str,
        help="Network id to scrape, e.g. phoenix-1",
    )
    parser.add_argument(
        "--dex",
        type=str,
        choices=list_supported(),
        help="DEX to scrape",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="YAML config file (replaces environment configuration)",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write the full result as JSON to this file",
    )

    resolution_group = parser.add_argument_group("Resolution Options")
    resolution_group.add_argument(
        "--cache-dir",
        type=Path,
        help="Directory for cached chain-registry asset lists",
    )
    resolution_group.add_argument(
        "--token-discriminator",
        choices=[d.value for d in TokenDiscriminator],
        help="Token info field used for CW20 names",
    )
    resolution_group.add_argument(
        "--name-collision-policy",
        choices=[p.value for p in NameCollisionPolicy],
        help="How to handle two assets resolving to the same name",
    )
    resolution_group.add_argument(
        "--strict-trace-path",
        action="store_true",
        help="Require the transfer port on every hop of IBC trace paths",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    return parser


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> ScraperConfig:
    """
    Build scraper configuration: file or environment, then CLI overrides.
    """
    if args.config:
        config = ScraperConfig.from_yaml(args.config)
    else:
        config = ScraperConfig.from_env()

    if args.network_id:
        config.network_id = args.network_id
    if args.dex:
        config.dex = args.dex
    if args.cache_dir:
        config.cache_dir = args.cache_dir
    if args.token_discriminator:
        config.token_discriminator = TokenDiscriminator(args.token_discriminator)
    if args.name_collision_policy:
        config.name_collision_policy = NameCollisionPolicy(args.name_collision_policy)
    if args.strict_trace_path:
        config.strict_trace_path = True
    if args.log_level:
        config.log_level = args.log_level

    return config


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def log_error_chain(error: BaseException) -> None:
    """Log an error followed by each of its causes."""
    logger.error(str(error))
    seen = {id(error)}
    cause = getattr(error, "original_error", None) or error.__cause__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        logger.error(f"because: {cause}")
        cause = getattr(cause, "original_error", None) or cause.__cause__


def print_summary(result: NormalizationResult) -> None:
    """Print a result summary."""
    print()
    print("=" * 60)
    print("  ANS SCRAPE RESULT")
    print("=" * 60)
    for key, count in result.summary().items():
        print(f"  {key:20s} {count}")
    print("=" * 60)
    print()


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(config: ScraperConfig, output: Optional[Path] = None) -> int:
    """
    Run one scrape.

    Returns:
        Exit code
    """
    try:
        async with ScraperPipeline(config) as pipeline:
            result = await pipeline.run()
    except AnsScraperError as e:
        log_error_chain(e)
        return 1

    print_summary(result)

    if output:
        with open(output, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.info(f"Result written to {output}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except (AnsScraperError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)

    try:
        return asyncio.run(async_main(config, args.output))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
