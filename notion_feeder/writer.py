"""Writes new feed items to the reader database."""

from datetime import UTC, datetime
from typing import Any

from .logging_config import create_execution_logger
from .models import FeedItem, ReaderRecord, ReaderSchema
from .normalize import normalize_title
from .notion import NotionAPIError, NotionClient

UNKNOWN_SOURCE = "Unknown"

# Notion rejects text objects longer than this
RICH_TEXT_LIMIT = 2000
# and more than this many rich text objects per block
RICH_TEXT_PER_BLOCK = 100


def _text(content: str) -> dict[str, Any]:
    return {"type": "text", "text": {"content": content}}


def record_title(title: str | None) -> str:
    """Normalized title cut to what a Notion title property accepts."""
    return normalize_title(title)[:RICH_TEXT_LIMIT]


def build_record(item: FeedItem, now: datetime | None = None) -> ReaderRecord:
    """Derive the reader row for a feed item."""
    return ReaderRecord(
        title=record_title(item.title),
        url=item.link,
        created_at=item.published or now or datetime.now(UTC),
        source=item.creator or UNKNOWN_SOURCE,
    )


def content_blocks(content: str) -> list[dict[str, Any]]:
    """Split item content into paragraph blocks within Notion's text limits."""
    if not content:
        return []

    chunks = [
        content[i : i + RICH_TEXT_LIMIT]
        for i in range(0, len(content), RICH_TEXT_LIMIT)
    ]
    blocks = []
    for i in range(0, len(chunks), RICH_TEXT_PER_BLOCK):
        blocks.append(
            {
                "object": "block",
                "type": "paragraph",
                "paragraph": {
                    "rich_text": [
                        _text(chunk) for chunk in chunks[i : i + RICH_TEXT_PER_BLOCK]
                    ]
                },
            }
        )
    return blocks


class ItemWriter:
    """Creates reader database rows for unseen feed items."""

    def __init__(
        self,
        client: NotionClient,
        database_id: str,
        schema: ReaderSchema | None = None,
        include_content: bool = True,
        execution_id: str | None = None,
    ):
        self.client = client
        self.database_id = database_id
        self.schema = schema or ReaderSchema()
        self.include_content = include_content
        self.logger = create_execution_logger("item_writer", execution_id)

    def build_properties(self, record: ReaderRecord) -> dict[str, Any]:
        """Map a ReaderRecord onto Notion page properties.

        ``Read`` is not sent: new rows take the checkbox default, unchecked.
        """
        properties: dict[str, Any] = {
            self.schema.title: {"title": [_text(record.title)]},
            self.schema.created_at: {"date": {"start": record.created_at.isoformat()}},
            self.schema.source: {"rich_text": [_text(record.source[:RICH_TEXT_LIMIT])]},
        }
        # Notion rejects empty strings for url properties
        properties[self.schema.url] = {"url": record.url or None}
        return properties

    def add_item(self, item: FeedItem) -> bool:
        """Add a new item to the reader database.

        Args:
            item: A feed item already judged not to be a duplicate

        Returns:
            True if the row was created, False if the write failed
        """
        record = build_record(item)
        children = content_blocks(item.content) if self.include_content else []

        try:
            page = self.client.create_page(
                self.database_id,
                self.build_properties(record),
                children=children or None,
            )
        except NotionAPIError as e:
            self.logger.error(
                f'Error adding item "{record.title}": {e}',
                item_title=record.title,
                item_link=record.url,
                error=str(e),
            )
            return False

        record.page_id = page.get("id")
        self.logger.info(
            f"Added item: {record.title}",
            item_title=record.title,
            page_id=record.page_id,
        )
        return True
