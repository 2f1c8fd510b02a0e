# tests/core/test_config.py
"""
Tests for the Config class: environment parsing, defaults and validation.
"""

import os
from unittest.mock import patch

import pytest

from clustercost.core.config import (
    DEFAULT_SYSTEM_NAMESPACES,
    MIN_SCRAPE_INTERVAL_SECONDS,
    Config,
    resolve_cluster_identity,
)
from clustercost.core.exceptions import ConfigurationError


class TestDefaults:
    def test_defaults_without_environment(self):
        cfg = Config()

        assert cfg.CLUSTER_NAME == "kubernetes"
        assert cfg.CLUSTER_ID == "kubernetes"
        assert cfg.SCRAPE_INTERVAL_SECONDS == 60
        assert cfg.METRICS_TIMEOUT == 15.0
        assert cfg.DEFAULT_NODE_PRICE == 0.1
        assert cfg.API_PORT == 8080
        assert cfg.ENV_SYSTEM_NAMESPACES == DEFAULT_SYSTEM_NAMESPACES
        assert cfg.INSTANCE_PRICES == {}

    def test_cluster_id_defaults_to_name(self):
        with patch.dict(os.environ, {"CLUSTERCOST_CLUSTER_NAME": "prod-eu"}):
            cfg = Config()
        assert cfg.CLUSTER_ID == "prod-eu"

    def test_explicit_cluster_id_wins(self):
        with patch.dict(os.environ, {"CLUSTERCOST_CLUSTER_NAME": "prod-eu", "CLUSTERCOST_CLUSTER_ID": "c-123"}):
            cfg = Config()
        assert cfg.CLUSTER_ID == "c-123"


class TestParsing:
    def test_scrape_interval_floored(self):
        with patch.dict(os.environ, {"CLUSTERCOST_SCRAPE_INTERVAL": "1"}):
            cfg = Config()
        assert cfg.SCRAPE_INTERVAL_SECONDS == MIN_SCRAPE_INTERVAL_SECONDS

    def test_invalid_integer_falls_back_to_default(self):
        with patch.dict(os.environ, {"CLUSTERCOST_API_PORT": "http"}):
            cfg = Config()
        assert cfg.API_PORT == 8080

    def test_lists_ignore_blank_items(self):
        with patch.dict(os.environ, {"CLUSTERCOST_ENV_SYSTEM_NAMESPACES": " kube-system, ,infra "}):
            cfg = Config()
        assert cfg.ENV_SYSTEM_NAMESPACES == ["kube-system", "infra"]

    def test_instance_prices_json(self):
        with patch.dict(os.environ, {"CLUSTERCOST_INSTANCE_PRICES": '{"m5.large": 0.096, "t3.micro": "0.01"}'}):
            cfg = Config()
        assert cfg.INSTANCE_PRICES == {"m5.large": 0.096, "t3.micro": 0.01}

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '{"m5.large": "cheap"}'])
    def test_invalid_instance_prices_raise(self, raw):
        with patch.dict(os.environ, {"CLUSTERCOST_INSTANCE_PRICES": raw}):
            cfg = Config()
        with pytest.raises(ConfigurationError):
            cfg.validate_instance()


class TestValidation:
    def test_valid_defaults(self):
        Config().validate_instance()

    @pytest.mark.parametrize(
        "env",
        [
            {"CLUSTERCOST_DEFAULT_NODE_PRICE": "-1"},
            {"CLUSTERCOST_API_PORT": "70000"},
            {"CLUSTERCOST_CACHE_SYNC_TIMEOUT": "0"},
            {"CLUSTERCOST_METRICS_TIMEOUT": "-5"},
        ],
    )
    def test_invalid_values_raise(self, env):
        with patch.dict(os.environ, env):
            cfg = Config()
        with pytest.raises(ConfigurationError):
            cfg.validate_instance()


class TestGetSecret:
    """Tests for the Config._get_secret method."""

    def test_get_secret_from_env_var(self):
        with patch.dict(os.environ, {"TEST_SECRET": "env_value"}):
            assert Config._get_secret("TEST_SECRET") == "env_value"

    def test_get_secret_with_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert Config._get_secret("NONEXISTENT_SECRET", default="default_value") == "default_value"

    def test_get_secret_file_takes_precedence_over_env(self):
        """File-based values (mounted ConfigMap/Secret) take precedence over environment variables."""
        with patch.dict(os.environ, {"TEST_SECRET": "env_value"}):
            with patch("clustercost.core.config.os.path.exists", return_value=True):
                with patch("builtins.open", create=True) as mock_open:
                    mock_open.return_value.__enter__.return_value.read.return_value = "  file_value \n"
                    assert Config._get_secret("TEST_SECRET") == "file_value"

    def test_get_secret_permission_error(self):
        with patch("clustercost.core.config.os.path.exists", return_value=True):
            with patch("builtins.open", side_effect=PermissionError("Permission denied")):
                with pytest.raises(PermissionError) as exc_info:
                    Config._get_secret("TEST_SECRET")

        assert "cannot be read due to permission denied" in str(exc_info.value)

    def test_get_secret_io_error(self):
        with patch("clustercost.core.config.os.path.exists", return_value=True):
            with patch("builtins.open", side_effect=IOError("Disk read error")):
                with pytest.raises(IOError) as exc_info:
                    Config._get_secret("TEST_SECRET")

        assert "Please check the file integrity" in str(exc_info.value)


class TestResolveClusterIdentity:
    def test_placeholder_without_detection_becomes_unknown(self):
        assert resolve_cluster_identity("kubernetes", "kubernetes") == ("unknown", "unknown")

    def test_empty_name_becomes_unknown(self):
        assert resolve_cluster_identity("", "") == ("unknown", "unknown")

    def test_detected_name_replaces_placeholder(self):
        assert resolve_cluster_identity("kubernetes", "kubernetes", "shop-eks") == ("shop-eks", "shop-eks")

    def test_explicit_cluster_id_is_kept(self):
        assert resolve_cluster_identity("kubernetes", "c-123", "shop-eks") == ("shop-eks", "c-123")

    def test_explicit_cluster_name_is_kept(self):
        assert resolve_cluster_identity("prod-eu", "prod-eu", "shop-eks") == ("prod-eu", "prod-eu")
