"""
Tests for environment-driven settings
"""
import importlib
import logging

import pytest

import config


class TestLogLevel:
    """Test LOG_LEVEL parsing"""

    @pytest.fixture
    def reload_config(self, monkeypatch):
        yield lambda: importlib.reload(config)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        importlib.reload(config)

    def test_lowercase_level_is_normalized(self, monkeypatch, reload_config):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        reloaded = reload_config()

        assert reloaded.LOG_LEVEL == "DEBUG"
        logging.getLogger("avro_build.test").setLevel(reloaded.LOG_LEVEL)

    def test_default_level(self, monkeypatch, reload_config):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert reload_config().LOG_LEVEL == "INFO"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
