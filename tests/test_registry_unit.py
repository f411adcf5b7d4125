"""Unit tests for the FeedRegistry."""

from unittest.mock import Mock

import pytest
from conftest import feed_properties

from notion_feeder.models import FeedSource, RegistrySchema
from notion_feeder.notion import NotionAPIError
from notion_feeder.registry import FeedRegistry

FEEDS_DB = "feeds-db"


class TestFeedRegistryUnit:
    """Unit tests for FeedRegistry.load_sources."""

    def test_loads_enabled_and_disabled_sources(self, fake_notion):
        fake_notion.add_page(FEEDS_DB, feed_properties("A", "https://a.example/feed"))
        fake_notion.add_page(
            FEEDS_DB, feed_properties("B", "https://b.example/feed", enabled=False)
        )
        registry = FeedRegistry(fake_notion, FEEDS_DB)

        assert registry.load_sources() == [
            FeedSource("A", "https://a.example/feed", True),
            FeedSource("B", "https://b.example/feed", False),
        ]

    def test_missing_enabled_column_means_enabled(self, fake_notion):
        fake_notion.add_page(
            FEEDS_DB, feed_properties("C", "https://c.example/feed", enabled=None)
        )

        [source] = FeedRegistry(fake_notion, FEEDS_DB).load_sources()

        assert source.enabled is True

    def test_rows_without_link_are_skipped(self, fake_notion):
        fake_notion.add_page(FEEDS_DB, feed_properties("Empty", None))
        fake_notion.add_page(FEEDS_DB, feed_properties("Blank", "   "))
        fake_notion.add_page(FEEDS_DB, feed_properties("Ok", "https://ok.example/rss"))

        sources = FeedRegistry(fake_notion, FEEDS_DB).load_sources()

        assert [s.title for s in sources] == ["Ok"]

    def test_untitled_source_falls_back_to_url(self, fake_notion):
        fake_notion.add_page(FEEDS_DB, feed_properties("", "https://d.example/feed"))

        [source] = FeedRegistry(fake_notion, FEEDS_DB).load_sources()

        assert source.title == "https://d.example/feed"

    def test_custom_schema(self, fake_notion):
        fake_notion.add_page(
            FEEDS_DB,
            {
                "Name": {"title": [{"plain_text": "Custom"}]},
                "Feed": {"url": "https://e.example/atom"},
                "Active": {"checkbox": False},
            },
        )
        schema = RegistrySchema(title="Name", link="Feed", enabled="Active")

        [source] = FeedRegistry(fake_notion, FEEDS_DB, schema=schema).load_sources()

        assert source == FeedSource("Custom", "https://e.example/atom", False)

    def test_query_failure_propagates(self):
        client = Mock()
        client.query_database.side_effect = NotionAPIError("unauthorized", status=401)

        with pytest.raises(NotionAPIError):
            FeedRegistry(client, FEEDS_DB).load_sources()
