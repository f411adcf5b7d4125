"""Feed source registry backed by the Notion feeds database."""

from typing import Any

from .logging_config import create_execution_logger
from .models import FeedSource, RegistrySchema
from .notion import NotionClient, plain_text


class FeedRegistry:
    """Loads the configured feed sources."""

    def __init__(
        self,
        client: NotionClient,
        database_id: str,
        schema: RegistrySchema | None = None,
        execution_id: str | None = None,
    ):
        self.client = client
        self.database_id = database_id
        self.schema = schema or RegistrySchema()
        self.logger = create_execution_logger("registry", execution_id)

    def load_sources(self) -> list[FeedSource]:
        """Fetch every feed source, enabled or not.

        Disabled sources are returned with ``enabled=False`` so the caller
        can report them. Rows without a feed URL are dropped.

        Raises:
            NotionAPIError: If the feeds database cannot be queried
        """
        pages = self.client.query_database(self.database_id)

        sources = []
        for page in pages:
            source = self.parse_source(page)
            if source is None:
                self.logger.warning(
                    "Skipping feed row without a URL", page_id=page.get("id")
                )
                continue
            sources.append(source)

        self.logger.info(
            f"Loaded {len(sources)} feed sources",
            sources_count=len(sources),
            enabled_count=sum(1 for s in sources if s.enabled),
        )
        return sources

    def parse_source(self, page: dict[str, Any]) -> FeedSource | None:
        """Convert a feeds database row into a FeedSource."""
        properties = page.get("properties", {})

        feed_url = (properties.get(self.schema.link) or {}).get("url") or ""
        if not feed_url.strip():
            return None

        title = plain_text((properties.get(self.schema.title) or {}).get("title"))

        # Registries without an Enabled column treat every row as enabled
        enabled_prop = properties.get(self.schema.enabled)
        enabled = True if enabled_prop is None else bool(enabled_prop.get("checkbox"))

        return FeedSource(title=title or feed_url, feed_url=feed_url.strip(), enabled=enabled)
