"""Minimal Notion REST API client for Notion Feeder."""

from typing import Any

import requests

from .config import DEFAULT_NOTION_VERSION
from .logging_config import create_execution_logger

NOTION_API_URL = "https://api.notion.com/v1"


class NotionAPIError(Exception):
    """Raised when a Notion API call fails or returns a non-2xx status."""

    def __init__(self, message: str, status: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status = status
        self.code = code


class NotionClient:
    """Thin wrapper over the database and page endpoints of the Notion API."""

    def __init__(
        self,
        token: str,
        timeout: int = 30,
        notion_version: str = DEFAULT_NOTION_VERSION,
        base_url: str = NOTION_API_URL,
        execution_id: str | None = None,
        session: requests.Session | None = None,
    ):
        """Initialize the client.

        Args:
            token: Notion integration token
            timeout: HTTP request timeout in seconds
            notion_version: Value of the Notion-Version header
            base_url: API root, overridable for tests
            execution_id: Execution ID for logging context
            session: Optional pre-built requests session
        """
        if not token or not token.strip():
            raise ValueError("Notion API token cannot be empty")

        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.logger = create_execution_logger("notion_client", execution_id)
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token.strip()}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
                "User-Agent": "Notion-Feeder/1.0",
            }
        )

        self.logger.info(
            "NotionClient initialized", timeout=timeout, notion_version=notion_version
        )

    def _request(self, method: str, path: str, payload: dict | None = None) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(
                method, url, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NotionAPIError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            code = None
            message = response.text
            try:
                body = response.json()
                code = body.get("code")
                message = body.get("message", message)
            except ValueError:
                pass
            raise NotionAPIError(
                f"{method} {path} returned {response.status_code}: {message}",
                status=response.status_code,
                code=code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise NotionAPIError(
                f"{method} {path} returned invalid JSON: {e}",
                status=response.status_code,
            ) from e

    def query_database(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        page_size: int = 100,
    ) -> list[dict[str, Any]]:
        """Query a database and return every matching page.

        Follows the ``has_more`` / ``next_cursor`` pagination until the
        result set is exhausted.

        Args:
            database_id: Database to query
            filter: Notion filter object, or None for all rows
            page_size: Rows requested per call (Notion caps this at 100)

        Returns:
            List of page objects

        Raises:
            NotionAPIError: If any page of the query fails
        """
        results: list[dict[str, Any]] = []
        cursor = None

        while True:
            payload: dict[str, Any] = {"page_size": page_size}
            if filter:
                payload["filter"] = filter
            if cursor:
                payload["start_cursor"] = cursor

            body = self._request("POST", f"databases/{database_id}/query", payload)
            results.extend(body.get("results", []))

            cursor = body.get("next_cursor")
            if not body.get("has_more") or not cursor:
                break

        self.logger.debug(
            "Queried database", database_id=database_id, results_count=len(results)
        )
        return results

    def create_page(
        self,
        database_id: str,
        properties: dict[str, Any],
        children: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Create a page (row) in a database."""
        payload: dict[str, Any] = {
            "parent": {"database_id": database_id},
            "properties": properties,
        }
        if children:
            payload["children"] = children
        return self._request("POST", "pages", payload)

    def update_page(self, page_id: str, **fields: Any) -> dict[str, Any]:
        """Update top-level page fields, e.g. ``archived=True``."""
        return self._request("PATCH", f"pages/{page_id}", fields)


def plain_text(rich_text: list[dict[str, Any]] | None) -> str:
    """Concatenate the plain text of a Notion rich text array."""
    if not rich_text:
        return ""
    return "".join(
        part.get("plain_text") or part.get("text", {}).get("content", "")
        for part in rich_text
    )
