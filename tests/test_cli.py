"""
Tests for the command line entry point.
"""

import json
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ans_scraper.cli import build_config, create_parser, log_error_chain, main
from ans_scraper.config import NameCollisionPolicy, ScraperConfig, TokenDiscriminator
from ans_scraper.exceptions import FetchFailedError, QueryFailedError
from ans_scraper.models import NativeDenom, NormalizationResult, PoolMetadata, PoolRecord, PoolType


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def result():
    return NormalizationResult(
        resolved_assets={"cosmoshub>atom": NativeDenom("ibc/ATOM")},
        resolved_pools=[PoolRecord(
            pool_id="terra1pool",
            metadata=PoolMetadata("astroport", PoolType.STABLE, ["cosmoshub>atom"]),
        )],
    )


def patched_pipeline(run):
    """ScraperPipeline replacement whose context manager yields a pipeline with `run`."""
    pipeline = MagicMock()
    pipeline.run = run
    pipeline_cls = MagicMock()
    pipeline_cls.return_value.__aenter__ = AsyncMock(return_value=pipeline)
    pipeline_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return patch("ans_scraper.cli.ScraperPipeline", pipeline_cls)


# ============================================================
# CONFIG BUILDER TESTS
# ============================================================

class TestBuildConfig:
    """Tests for CLI overrides."""

    def test_overrides_environment(self):
        args = create_parser().parse_args([
            "--network-id", "pisco-1",
            "--token-discriminator", "name",
            "--name-collision-policy", "report",
            "--strict-trace-path",
            "--cache-dir", "/tmp/ans",
            "--log-level", "DEBUG",
        ])

        with patch.object(ScraperConfig, "from_env", return_value=ScraperConfig()):
            config = build_config(args)

        assert config.network_id == "pisco-1"
        assert config.token_discriminator == TokenDiscriminator.NAME
        assert config.name_collision_policy == NameCollisionPolicy.REPORT
        assert config.strict_trace_path is True
        assert str(config.cache_dir) == "/tmp/ans"
        assert config.log_level == "DEBUG"

    def test_no_flags_keeps_environment(self):
        args = create_parser().parse_args([])
        env_config = ScraperConfig(network_id="pisco-1")

        with patch.object(ScraperConfig, "from_env", return_value=env_config):
            config = build_config(args)

        assert config.network_id == "pisco-1"
        assert config.strict_trace_path is False
        assert config.name_collision_policy == NameCollisionPolicy.OVERWRITE

    def test_config_file(self, tmp_path):
        path = tmp_path / "scraper.yaml"
        path.write_text("network_id: pisco-1\npage_size: 50\n")
        args = create_parser().parse_args(["--config", str(path)])

        config = build_config(args)

        assert config.network_id == "pisco-1"
        assert config.page_size == 50

    def test_unknown_dex_rejected_by_parser(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--dex", "osmosis"])


# ============================================================
# MAIN TESTS
# ============================================================

class TestMain:
    """Tests for the main entry point."""

    @pytest.fixture(autouse=True)
    def env_config(self):
        with patch.object(ScraperConfig, "from_env", return_value=ScraperConfig()):
            yield

    def test_writes_output(self, tmp_path, result):
        output = tmp_path / "result.json"

        with patched_pipeline(AsyncMock(return_value=result)):
            exit_code = main(["--output", str(output)])

        assert exit_code == 0
        data = json.loads(output.read_text())
        assert data["resolved_assets"] == {
            "cosmoshub>atom": {"kind": "native", "denom": "ibc/ATOM"},
        }
        assert data["resolved_pools"][0]["metadata"]["pool_type"] == "Stable"

    def test_scraper_error_exit_code(self, tmp_path):
        output = tmp_path / "result.json"
        error = FetchFailedError("HTTP 404", chain="nochain", status_code=404)

        with patched_pipeline(AsyncMock(side_effect=error)):
            exit_code = main(["--output", str(output)])

        assert exit_code == 1
        assert not output.exists()

    def test_bad_config_exit_code(self, tmp_path, capsys):
        path = tmp_path / "scraper.yaml"
        path.write_text("not_a_setting: 1\n")

        assert main(["--config", str(path)]) == 1
        assert "not_a_setting" in capsys.readouterr().err


class TestErrorChain:
    """Tests for cause-chain logging."""

    def test_logs_each_cause(self, caplog):
        root = OSError("connection reset")
        fetch = FetchFailedError("HTTP request failed", original_error=root)
        error = QueryFailedError("Smart query failed", original_error=fetch)

        with caplog.at_level(logging.ERROR, logger="ans_scraper.cli"):
            log_error_chain(error)

        messages = [r.getMessage() for r in caplog.records]
        assert len(messages) == 3
        assert "Smart query failed" in messages[0]
        assert messages[1].startswith("because: ") and "HTTP request failed" in messages[1]
        assert messages[2] == "because: connection reset"
