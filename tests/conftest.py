"""Shared fixtures: an in-memory stand-in for the Notion database API."""

import itertools
from datetime import datetime
from typing import Any

import pytest
from dateutil import parser as date_parser

from notion_feeder.notion import NotionAPIError, plain_text


class FakeNotionClient:
    """Evaluates Notion filters over in-memory pages.

    Supports the subset the feeder uses: ``or``/``and`` compounds,
    ``equals`` on title/url/checkbox properties and ``on_or_before`` on
    date properties.
    """

    def __init__(self):
        self.databases: dict[str, list[dict[str, Any]]] = {}
        self.fail_query = False
        self.fail_create = False
        self.fail_update_ids: set[str] = set()
        self.queries: list[tuple[str, Any]] = []
        self.created: list[dict[str, Any]] = []
        self.updated: list[tuple[str, dict[str, Any]]] = []
        self._ids = itertools.count(1)

    def add_page(self, database_id: str, properties: dict[str, Any], **fields) -> dict:
        page = {
            "id": fields.pop("id", f"page-{next(self._ids)}"),
            "archived": False,
            "properties": properties,
            **fields,
        }
        self.databases.setdefault(database_id, []).append(page)
        return page

    def query_database(self, database_id, filter=None, page_size=100):
        self.queries.append((database_id, filter))
        if self.fail_query:
            raise NotionAPIError("Could not find database", status=404, code="object_not_found")
        return [
            page
            for page in self.databases.get(database_id, [])
            if not page["archived"] and (filter is None or self._matches(page, filter))
        ]

    def create_page(self, database_id, properties, children=None):
        if self.fail_create:
            raise NotionAPIError("Invalid request", status=400, code="validation_error")
        page = self.add_page(database_id, properties, children=children)
        self.created.append(page)
        return page

    def update_page(self, page_id, **fields):
        if page_id in self.fail_update_ids:
            raise NotionAPIError("Conflict", status=409, code="conflict_error")
        for pages in self.databases.values():
            for page in pages:
                if page["id"] == page_id:
                    page.update(fields)
                    self.updated.append((page_id, fields))
                    return page
        raise NotionAPIError("Page not found", status=404, code="object_not_found")

    def _matches(self, page, filter) -> bool:
        if "or" in filter:
            return any(self._matches(page, f) for f in filter["or"])
        if "and" in filter:
            return all(self._matches(page, f) for f in filter["and"])

        prop = page["properties"].get(filter["property"], {})
        if "title" in filter:
            return plain_text(prop.get("title")) == filter["title"]["equals"]
        if "url" in filter:
            return prop.get("url") == filter["url"]["equals"]
        if "checkbox" in filter:
            return bool(prop.get("checkbox", False)) == filter["checkbox"]["equals"]
        if "date" in filter:
            start = (prop.get("date") or {}).get("start")
            if not start:
                return False
            bound = date_parser.isoparse(filter["date"]["on_or_before"])
            return date_parser.isoparse(start) <= bound
        raise AssertionError(f"Unsupported filter {filter}")


def reader_properties(
    title: str, url: str, created_at: datetime, read: bool = False, source: str = "Unknown"
) -> dict[str, Any]:
    """Reader database properties shaped like the Notion API returns them."""
    return {
        "Title": {"title": [{"plain_text": title, "text": {"content": title}}]},
        "URL": {"url": url},
        "Date": {"date": {"start": created_at.isoformat()}},
        "Source": {"rich_text": [{"plain_text": source, "text": {"content": source}}]},
        "Read": {"checkbox": read},
    }


def feed_properties(title: str, link: str, enabled: bool | None = True) -> dict[str, Any]:
    """Feeds database properties shaped like the Notion API returns them."""
    properties = {
        "Title": {"title": [{"plain_text": title}]},
        "Link": {"url": link},
    }
    if enabled is not None:
        properties["Enabled"] = {"checkbox": enabled}
    return properties


@pytest.fixture
def fake_notion():
    return FakeNotionClient()
