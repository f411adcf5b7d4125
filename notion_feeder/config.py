"""Configuration management for Notion Feeder."""

import os
from dataclasses import dataclass, field
from enum import Enum

from .models import ReaderSchema, RegistrySchema

DEFAULT_NOTION_VERSION = "2022-06-28"


class DuplicatePolicy(str, Enum):
    """What the duplicate check answers when the reader query fails."""

    FAIL_OPEN = "fail_open"  # treat as new, may insert a duplicate
    FAIL_CLOSED = "fail_closed"  # treat as duplicate, item waits for next run


@dataclass
class NotionConfig:
    """Configuration for the Notion API."""

    api_token: str
    reader_database_id: str
    feeds_database_id: str
    notion_version: str = DEFAULT_NOTION_VERSION
    timeout: int = 30
    reader_schema: ReaderSchema = field(default_factory=ReaderSchema)
    registry_schema: RegistrySchema = field(default_factory=RegistrySchema)


@dataclass
class RetentionConfig:
    """Configuration for archiving old unread items."""

    retention_days: int = 30


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() not in ("", "0", "false", "no")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


class Config:
    """Main configuration manager."""

    REQUIRED = {
        "NOTION_READER_DATABASE_ID": "reader_database_id",
        "NOTION_FEEDS_DATABASE_ID": "feeds_database_id",
    }

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.notion_api_token = os.getenv("NOTION_API_TOKEN", "")
        self.notion_secret_name = os.getenv("NOTION_SECRET_NAME", "")
        self.reader_database_id = os.getenv("NOTION_READER_DATABASE_ID", "")
        self.feeds_database_id = os.getenv("NOTION_FEEDS_DATABASE_ID", "")
        self.notion_version = os.getenv("NOTION_VERSION", DEFAULT_NOTION_VERSION)
        self.ci = _env_flag("CI")
        self.log_level = os.getenv("LOG_LEVEL", "")
        self.aws_region = os.getenv(
            "AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        )
        self.publish_metrics = _env_flag("PUBLISH_METRICS")
        self.request_timeout = _env_int("REQUEST_TIMEOUT", 30)
        self.retention_days = _env_int("RETENTION_DAYS", 30)

        policy = os.getenv("DUPLICATE_CHECK_POLICY", DuplicatePolicy.FAIL_OPEN.value)
        try:
            self.duplicate_policy = DuplicatePolicy(policy.strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in DuplicatePolicy)
            raise ValueError(
                f"DUPLICATE_CHECK_POLICY must be one of {allowed}, got {policy!r}"
            )

    def validate(self) -> None:
        """Raise ValueError naming every missing required setting."""
        missing = [
            env_name
            for env_name, attr in self.REQUIRED.items()
            if not getattr(self, attr).strip()
        ]
        if not self.notion_api_token.strip() and not self.notion_secret_name.strip():
            missing.append("NOTION_API_TOKEN (or NOTION_SECRET_NAME)")
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

    def get_notion_config(self, api_token: str | None = None) -> NotionConfig:
        """Get Notion configuration.

        Args:
            api_token: Token resolved elsewhere (e.g. Secrets Manager); falls
                back to NOTION_API_TOKEN
        """
        return NotionConfig(
            api_token=api_token or self.notion_api_token,
            reader_database_id=self.reader_database_id,
            feeds_database_id=self.feeds_database_id,
            notion_version=self.notion_version,
            timeout=self.request_timeout,
        )

    def get_retention_config(self) -> RetentionConfig:
        """Get retention configuration."""
        return RetentionConfig(retention_days=self.retention_days)
