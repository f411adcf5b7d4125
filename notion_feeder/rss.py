"""RSS/Atom feed fetching for Notion Feeder."""

from datetime import UTC, datetime

import feedparser
import requests
from dateutil import parser as date_parser

from .logging_config import create_execution_logger
from .models import FeedItem
from .normalize import clean_html


class FeedProcessor:
    """Handles RSS/Atom feed fetching and normalization."""

    def __init__(self, timeout: int = 30, execution_id: str | None = None):
        """Initialize FeedProcessor with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            execution_id: Execution ID for logging context
        """
        self.timeout = timeout
        self.logger = create_execution_logger("feed_processor", execution_id)
        self.session = requests.Session()
        self.session.headers.update(
            {"User-Agent": "Notion-Feeder/1.0 (RSS to Notion reader)"}
        )

        self.logger.info("FeedProcessor initialized", timeout=timeout)

    def parse_feed(self, feed_url: str) -> list[FeedItem]:
        """Fetch and parse a single RSS/Atom feed.

        Args:
            feed_url: URL of the RSS/Atom feed

        Returns:
            List of FeedItem objects in feed order

        Raises:
            requests.RequestException: If feed download fails
            ValueError: If the payload is not a feed at all
        """
        self.logger.info("Downloading feed content", feed_url=feed_url)
        try:
            response = self.session.get(feed_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self.logger.error(
                f"Failed to download feed {feed_url}: {e}",
                feed_url=feed_url,
                error=str(e),
            )
            raise

        feed = feedparser.parse(response.content)

        if feed.bozo and hasattr(feed, "bozo_exception"):
            # feedparser recovers from most malformed feeds; only give up when
            # nothing usable came out
            if not feed.entries and not feed.get("version"):
                raise ValueError(
                    f"Could not parse feed {feed_url}: {feed.bozo_exception}"
                )
            self.logger.warning(
                f"Feed parsing warning for {feed_url}: {feed.bozo_exception}",
                feed_url=feed_url,
                bozo_exception=str(feed.bozo_exception),
            )

        items = []
        for entry in feed.entries:
            try:
                items.append(self.normalize_item(entry, feed_url))
            except Exception as e:
                self.logger.warning(
                    f"Failed to normalize entry from {feed_url}: {e}",
                    feed_url=feed_url,
                    error=str(e),
                )
                continue

        self.logger.info(
            "Successfully parsed feed",
            feed_url=feed_url,
            items_count=len(items),
            total_entries=len(feed.entries),
        )
        return items

    def normalize_item(self, raw_item, feed_url: str) -> FeedItem:
        """Normalize a raw feedparser entry into a FeedItem.

        The title is kept raw; normalization happens at comparison and write
        time so that both use the same canonical form.
        """
        title = getattr(raw_item, "title", None) or ""
        link = getattr(raw_item, "link", None) or ""

        # feedparser maps dc:creator onto author
        creator = getattr(raw_item, "author", None) or None

        published = self.parse_date(
            getattr(raw_item, "published", None) or getattr(raw_item, "updated", None)
        )

        content = ""
        if getattr(raw_item, "content", None):
            # Atom content is a list of dicts
            if isinstance(raw_item.content, list):
                content = raw_item.content[0].get("value", "")
            else:
                content = str(raw_item.content)
        elif getattr(raw_item, "summary", None):
            content = raw_item.summary
        elif getattr(raw_item, "description", None):
            content = raw_item.description

        return FeedItem(
            title=title,
            link=link,
            published=published,
            creator=creator,
            content=clean_html(content),
            feed_url=feed_url,
        )

    def parse_date(self, value: str | None) -> datetime | None:
        """Parse a feed date string; naive values are taken as UTC."""
        if not value:
            return None
        try:
            published = date_parser.parse(value)
        except (ValueError, TypeError, OverflowError):
            self.logger.debug("Unparseable item date", raw_date=str(value))
            return None
        if published.tzinfo is None:
            published = published.replace(tzinfo=UTC)
        return published
