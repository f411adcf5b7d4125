"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from notion_feeder.config import Config, DuplicatePolicy
from notion_feeder.logging_config import resolve_log_level

BASE_ENV = {
    "NOTION_API_TOKEN": "secret_abc",
    "NOTION_READER_DATABASE_ID": "reader-db",
    "NOTION_FEEDS_DATABASE_ID": "feeds-db",
}


class TestConfigUnit:
    """Unit tests for Config class."""

    def test_reads_notion_settings(self):
        with patch.dict(os.environ, BASE_ENV, clear=True):
            config = Config()
            config.validate()
            notion_config = config.get_notion_config()

        assert notion_config.api_token == "secret_abc"
        assert notion_config.reader_database_id == "reader-db"
        assert notion_config.feeds_database_id == "feeds-db"
        assert notion_config.timeout == 30
        assert notion_config.reader_schema.created_at == "Date"
        assert notion_config.registry_schema.link == "Link"

    def test_defaults(self):
        with patch.dict(os.environ, BASE_ENV, clear=True):
            config = Config()

        assert config.duplicate_policy is DuplicatePolicy.FAIL_OPEN
        assert config.get_retention_config().retention_days == 30
        assert config.ci is False
        assert config.publish_metrics is False
        assert config.aws_region == "us-east-1"

    def test_validate_names_missing_values(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config()

        with pytest.raises(ValueError) as excinfo:
            config.validate()

        message = str(excinfo.value)
        assert "NOTION_READER_DATABASE_ID" in message
        assert "NOTION_FEEDS_DATABASE_ID" in message
        assert "NOTION_API_TOKEN" in message

    def test_secret_name_satisfies_token_requirement(self):
        env = {**BASE_ENV, "NOTION_API_TOKEN": "", "NOTION_SECRET_NAME": "notion-token"}
        with patch.dict(os.environ, env, clear=True):
            Config().validate()

    def test_explicit_token_overrides_env(self):
        with patch.dict(os.environ, BASE_ENV, clear=True):
            notion_config = Config().get_notion_config(api_token="from-secrets")

        assert notion_config.api_token == "from-secrets"

    def test_fail_closed_policy(self):
        with patch.dict(os.environ, {**BASE_ENV, "DUPLICATE_CHECK_POLICY": "FAIL_CLOSED"}, clear=True):
            assert Config().duplicate_policy is DuplicatePolicy.FAIL_CLOSED

    def test_invalid_policy_rejected(self):
        with patch.dict(os.environ, {**BASE_ENV, "DUPLICATE_CHECK_POLICY": "maybe"}, clear=True):
            with pytest.raises(ValueError, match="DUPLICATE_CHECK_POLICY"):
                Config()

    @pytest.mark.parametrize("value", ["abc", "0", "-3"])
    def test_invalid_retention_rejected(self, value):
        with patch.dict(os.environ, {**BASE_ENV, "RETENTION_DAYS": value}, clear=True):
            with pytest.raises(ValueError, match="RETENTION_DAYS"):
                Config()

    @pytest.mark.parametrize(
        "ci_value,expected", [("true", True), ("1", True), ("false", False), ("", False)]
    )
    def test_ci_flag(self, ci_value, expected):
        with patch.dict(os.environ, {**BASE_ENV, "CI": ci_value}, clear=True):
            assert Config().ci is expected


class TestResolveLogLevel:
    """CI only affects verbosity."""

    def test_ci_logs_at_info(self):
        assert resolve_log_level(ci=True) == "INFO"

    def test_local_logs_at_debug(self):
        assert resolve_log_level(ci=False) == "DEBUG"

    def test_override_wins(self):
        assert resolve_log_level(ci=False, override="warning") == "WARNING"
