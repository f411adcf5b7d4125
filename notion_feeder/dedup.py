"""Deduplication module for Notion Feeder."""

from typing import Any

from .config import DuplicatePolicy
from .logging_config import create_execution_logger
from .models import FeedItem, ReaderSchema
from .notion import NotionAPIError, NotionClient
from .writer import record_title


class Deduplicator:
    """Checks whether a feed item is already in the reader database."""

    def __init__(
        self,
        client: NotionClient,
        database_id: str,
        schema: ReaderSchema | None = None,
        policy: DuplicatePolicy = DuplicatePolicy.FAIL_OPEN,
        execution_id: str | None = None,
    ):
        """Initialize the Deduplicator.

        Args:
            client: Notion client used for the existence query
            database_id: Reader database ID
            schema: Reader database property names
            policy: Answer to give when the existence query fails
            execution_id: Execution ID for logging context
        """
        self.client = client
        self.database_id = database_id
        self.schema = schema or ReaderSchema()
        self.policy = DuplicatePolicy(policy)
        self.logger = create_execution_logger("deduplicator", execution_id)

        self.logger.info(
            "Deduplicator initialized",
            database_id=database_id,
            policy=self.policy.value,
        )

    def build_filter(self, item: FeedItem) -> dict[str, Any] | None:
        """Build the title-or-url match filter for an item.

        Empty values are left out so they never match rows that are blank
        too. Returns None when the item has neither a title nor a link.
        """
        clauses = []
        title = record_title(item.title)
        if title:
            clauses.append({"property": self.schema.title, "title": {"equals": title}})
        if item.link:
            clauses.append({"property": self.schema.url, "url": {"equals": item.link}})
        if not clauses:
            return None
        return {"or": clauses}

    def is_duplicate(self, item: FeedItem) -> bool:
        """Check if an item already exists in the reader database.

        An item is a duplicate when any row has the same normalized title or
        the same URL. Never raises: on query failure the configured policy
        decides the answer.

        Args:
            item: The feed item to check

        Returns:
            True if a matching row exists, False otherwise
        """
        match_filter = self.build_filter(item)
        if match_filter is None:
            self.logger.debug("Item has no title or link to match", item_title=item.title)
            return False

        try:
            results = self.client.query_database(self.database_id, filter=match_filter)
        except NotionAPIError as e:
            assume_duplicate = self.policy is DuplicatePolicy.FAIL_CLOSED
            self.logger.error(
                f"Error checking duplicate: {e}",
                item_title=item.title,
                item_link=item.link,
                error=str(e),
                assumed_duplicate=assume_duplicate,
            )
            return assume_duplicate

        is_duplicate = len(results) > 0
        self.logger.debug(
            "Checked for duplicate",
            item_title=item.title,
            is_duplicate=is_duplicate,
        )
        return is_duplicate
