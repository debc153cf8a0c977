"""Unit tests for engine configuration"""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from engagement_engine.config import EngineConfig


class TestEngineConfig:
    """Tests for EngineConfig"""

    def test_defaults(self):
        config = EngineConfig()

        assert config.memory_capacity == 1000
        assert config.store_timeout_seconds == 2.0
        assert config.tracking_enabled is True
        assert config.attribute_query_clicks is True
        assert config.tz == ZoneInfo("UTC")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://app@db:5432/engagement")
        monkeypatch.setenv("ENGAGEMENT_MEMORY_CAPACITY", "250")
        monkeypatch.setenv("ENGAGEMENT_STORE_TIMEOUT_SECONDS", "0.5")
        monkeypatch.setenv("ENGAGEMENT_REPORT_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("ENGAGEMENT_TRACKING_ENABLED", "false")
        monkeypatch.setenv("ENGAGEMENT_ATTRIBUTE_QUERY_CLICKS", "0")

        config = EngineConfig.from_env()

        assert config.database_url == "postgresql://app@db:5432/engagement"
        assert config.memory_capacity == 250
        assert config.store_timeout_seconds == 0.5
        assert config.tz == ZoneInfo("Europe/Berlin")
        assert config.tracking_enabled is False
        assert config.attribute_query_clicks is False

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("ENGAGEMENT_MEMORY_CAPACITY", "250")
        config = EngineConfig.from_env(memory_capacity=10)
        assert config.memory_capacity == 10

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            EngineConfig(report_timezone="Mars/Olympus_Mons")

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValidationError):
            EngineConfig(memory_capacity=0)
