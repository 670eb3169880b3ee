from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from snapsync.config.settings import FatalStartupError, ProxySettings, Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings(_env_file=None)
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings(_env_file=None)
        assert s.db_port == 5432

    def test_default_start_date_is_aware(self) -> None:
        s = Settings(_env_file=None)
        assert s.start_date == datetime(2025, 7, 15, tzinfo=timezone.utc)

    def test_default_scan_window(self) -> None:
        s = Settings(_env_file=None)
        assert s.batch_size == 100
        assert s.max_scan_pages == 1

    def test_default_intervals(self) -> None:
        s = Settings(_env_file=None)
        assert s.scan_interval_seconds == 30
        assert s.rate_limit_backoff_seconds == 120


class TestSettingsFromEnv:
    def test_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHANNEL_ID", "123")
        monkeypatch.setenv("SCAN_INTERVAL_SECONDS", "5")
        s = Settings(_env_file=None)
        assert s.channel_id == "123"
        assert s.scan_interval_seconds == 5

    def test_naive_start_date_becomes_utc(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("START_DATE", "2025-08-01T00:00:00")
        s = Settings(_env_file=None)
        assert s.start_date.tzinfo == timezone.utc

    def test_batch_size_above_100_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, batch_size=101)

    def test_batch_size_zero_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, batch_size=0)


class TestRequiredSettings:
    def test_reports_every_missing_name(self) -> None:
        s = Settings(_env_file=None, discord_token="t", db_password="pw")
        assert s.missing_required() == ["CHANNEL_ID", "PROXY_BASE_URL", "PUBLIC_BASE_URL"]

    def test_ensure_required_raises(self) -> None:
        s = Settings(_env_file=None)
        with pytest.raises(FatalStartupError, match="DISCORD_TOKEN"):
            s.ensure_required()

    def test_complete_config_passes(self) -> None:
        s = Settings(
            _env_file=None,
            discord_token="t",
            channel_id="c",
            proxy_base_url="https://proxy",
            public_base_url="https://cdn",
            db_password="pw",
        )
        s.ensure_required()


class TestProxySettings:
    def test_splits_comma_separated_tokens(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROXY_GITHUB_TOKENS", "ghp_a, ghp_b,,ghp_c ")
        s = ProxySettings(_env_file=None)
        assert s.github_tokens == ["ghp_a", "ghp_b", "ghp_c"]

    def test_defaults(self) -> None:
        s = ProxySettings(_env_file=None)
        assert s.port == 8787
        assert s.github_branch == "master"
        assert s.quota_fresh_seconds == 10.0
        assert s.image_cache_seconds == 31536000
        assert s.listing_cache_seconds == 300
        assert s.cache_max_entries == 1024

    def test_no_tokens_is_fatal(self) -> None:
        s = ProxySettings(_env_file=None, github_owner="o", github_repo="r")
        with pytest.raises(FatalStartupError, match="PROXY_GITHUB_TOKENS"):
            s.ensure_required()
