"""Data models for Notion Feeder."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class FeedSource:
    """A feed endpoint configured in the feeds database."""

    title: str
    feed_url: str
    enabled: bool = True


@dataclass
class FeedItem:
    """Represents a single RSS/Atom feed item."""

    title: str
    link: str
    published: datetime | None = None
    creator: str | None = None
    content: str = ""
    feed_url: str = ""


@dataclass
class ReaderRecord:
    """A row of the reader database."""

    title: str
    url: str
    created_at: datetime
    source: str
    read: bool = False
    archived: bool = False
    page_id: str | None = None


@dataclass(frozen=True)
class ReaderSchema:
    """Property names of the reader database."""

    title: str = "Title"
    url: str = "URL"
    created_at: str = "Date"
    source: str = "Source"
    read: str = "Read"


@dataclass(frozen=True)
class RegistrySchema:
    """Property names of the feeds database."""

    title: str = "Title"
    link: str = "Link"
    enabled: str = "Enabled"
