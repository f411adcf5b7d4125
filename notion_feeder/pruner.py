"""Archives old unread rows of the reader database."""

from datetime import UTC, datetime, timedelta
from typing import Any

from dateutil import parser as date_parser

from .logging_config import create_execution_logger
from .models import ReaderRecord, ReaderSchema
from .notion import NotionAPIError, NotionClient, plain_text


class RetentionPruner:
    """Archives reader rows that stayed unread past the retention window."""

    def __init__(
        self,
        client: NotionClient,
        database_id: str,
        schema: ReaderSchema | None = None,
        retention_days: int = 30,
        execution_id: str | None = None,
    ):
        """Initialize the pruner.

        Args:
            client: Notion client
            database_id: Reader database ID
            schema: Reader database property names
            retention_days: Age after which unread rows are archived
            execution_id: Execution ID for logging context
        """
        self.client = client
        self.database_id = database_id
        self.schema = schema or ReaderSchema()
        self.retention_days = retention_days
        self.logger = create_execution_logger("retention_pruner", execution_id)

    def cutoff(self, now: datetime | None = None) -> datetime:
        """Rows created at or before this instant are stale."""
        return (now or datetime.now(UTC)) - timedelta(days=self.retention_days)

    def build_filter(self, cutoff: datetime) -> dict[str, Any]:
        return {
            "and": [
                {
                    "property": self.schema.created_at,
                    "date": {"on_or_before": cutoff.isoformat()},
                },
                {"property": self.schema.read, "checkbox": {"equals": False}},
            ]
        }

    def find_stale(self, now: datetime | None = None) -> list[ReaderRecord]:
        """Return unread rows created on or before the cutoff.

        Raises:
            NotionAPIError: If the reader database cannot be queried
        """
        pages = self.client.query_database(
            self.database_id, filter=self.build_filter(self.cutoff(now))
        )
        return [self.parse_record(page) for page in pages]

    def parse_record(self, page: dict[str, Any]) -> ReaderRecord:
        """Convert a reader database page into a ReaderRecord."""
        properties = page.get("properties", {})

        date_prop = (properties.get(self.schema.created_at) or {}).get("date") or {}
        created_at = None
        if date_prop.get("start"):
            created_at = date_parser.isoparse(date_prop["start"])
        elif page.get("created_time"):
            created_at = date_parser.isoparse(page["created_time"])

        return ReaderRecord(
            title=plain_text((properties.get(self.schema.title) or {}).get("title")),
            url=(properties.get(self.schema.url) or {}).get("url") or "",
            created_at=created_at,
            source=plain_text(
                (properties.get(self.schema.source) or {}).get("rich_text")
            ),
            read=bool((properties.get(self.schema.read) or {}).get("checkbox")),
            archived=bool(page.get("archived")),
            page_id=page.get("id"),
        )

    def archive_stale(self, now: datetime | None = None) -> int:
        """Archive every stale unread row.

        Each update is attempted on its own; a failed update is logged and
        the remaining rows are still processed.

        Returns:
            Number of rows archived
        """
        self.logger.log_execution_start(retention_days=self.retention_days)

        try:
            stale = self.find_stale(now)
        except (NotionAPIError, ValueError) as e:
            self.logger.error(f"Error querying stale items: {e}", error=str(e))
            self.logger.log_execution_end(success=False, archived=0)
            return 0

        archived = 0
        for record in stale:
            try:
                self.client.update_page(record.page_id, archived=True)
            except NotionAPIError as e:
                self.logger.error(
                    f"Error archiving item {record.page_id}: {e}",
                    page_id=record.page_id,
                    item_title=record.title,
                    error=str(e),
                )
                continue
            record.archived = True
            archived += 1
            self.logger.debug(
                f"Archived item: {record.title}",
                page_id=record.page_id,
                item_title=record.title,
            )

        self.logger.log_execution_end(
            success=True, stale_count=len(stale), archived=archived
        )
        return archived
