"""Run orchestration: registry -> feeds -> dedup -> write -> prune."""

from dataclasses import dataclass
from typing import Any

from .config import Config
from .dedup import Deduplicator
from .logging_config import ExecutionLogger, create_execution_logger
from .notion import NotionClient
from .pruner import RetentionPruner
from .registry import FeedRegistry
from .rss import FeedProcessor
from .writer import ItemWriter


@dataclass
class Components:
    """Everything a run needs, wired to one Notion client."""

    registry: FeedRegistry
    processor: FeedProcessor
    deduplicator: Deduplicator
    writer: ItemWriter
    pruner: RetentionPruner


def new_metrics() -> dict[str, Any]:
    return {
        "feeds_processed": 0,
        "feeds_skipped": 0,
        "feeds_failed": 0,
        "items_found": 0,
        "items_added": 0,
        "items_deduplicated": 0,
        "items_failed": 0,
        "items_archived": 0,
        "errors": [],
        "aborted": False,
    }


def build_components(
    config: Config, client: NotionClient, execution_id: str | None = None
) -> Components:
    """Wire every run component from configuration and an injected client."""
    notion_config = config.get_notion_config()
    return Components(
        registry=FeedRegistry(
            client,
            notion_config.feeds_database_id,
            schema=notion_config.registry_schema,
            execution_id=execution_id,
        ),
        processor=FeedProcessor(
            timeout=config.request_timeout, execution_id=execution_id
        ),
        deduplicator=Deduplicator(
            client,
            notion_config.reader_database_id,
            schema=notion_config.reader_schema,
            policy=config.duplicate_policy,
            execution_id=execution_id,
        ),
        writer=ItemWriter(
            client,
            notion_config.reader_database_id,
            schema=notion_config.reader_schema,
            execution_id=execution_id,
        ),
        pruner=RetentionPruner(
            client,
            notion_config.reader_database_id,
            schema=notion_config.reader_schema,
            retention_days=config.get_retention_config().retention_days,
            execution_id=execution_id,
        ),
    )


def run_feeder(
    registry: FeedRegistry | None,
    processor: FeedProcessor | None,
    deduplicator: Deduplicator | None,
    writer: ItemWriter | None,
    pruner: RetentionPruner | None = None,
    logger: ExecutionLogger | None = None,
) -> dict[str, Any]:
    """Mirror new feed items into the reader database, then prune.

    Sources are processed one at a time. A failing source or item is logged
    and skipped; only a registry failure aborts the run. Passing ``None``
    for the registry skips ingestion; passing ``None`` for the pruner skips
    pruning.

    Returns:
        Metrics for the run
    """
    logger = logger or create_execution_logger("main")
    metrics = new_metrics()

    if registry is not None:
        if not ingest(registry, processor, deduplicator, writer, logger, metrics):
            metrics["aborted"] = True
            logger.log_metrics(metrics)
            return metrics

    if pruner is not None:
        metrics["items_archived"] = pruner.archive_stale()

    logger.log_metrics(metrics)
    return metrics


def ingest(
    registry: FeedRegistry,
    processor: FeedProcessor,
    deduplicator: Deduplicator,
    writer: ItemWriter,
    logger: ExecutionLogger,
    metrics: dict[str, Any],
) -> bool:
    """Process every enabled source. Returns False if the registry failed."""
    try:
        sources = registry.load_sources()
    except Exception as e:
        error_msg = f"Error fetching feeds: {e}"
        logger.error(error_msg, error=str(e))
        metrics["errors"].append(error_msg)
        return False

    for source in sources:
        if not source.enabled:
            logger.info(f"Skipping disabled feed: {source.title}", feed_url=source.feed_url)
            metrics["feeds_skipped"] += 1
            continue

        logger.info(f"Processing feed: {source.feed_url}", feed_url=source.feed_url)
        try:
            items = processor.parse_feed(source.feed_url)
        except Exception as e:
            error_msg = f"Error processing feed {source.feed_url}: {e}"
            logger.error(error_msg, feed_url=source.feed_url, error=str(e))
            metrics["errors"].append(error_msg)
            metrics["feeds_failed"] += 1
            continue

        metrics["feeds_processed"] += 1
        metrics["items_found"] += len(items)
        logger.log_feed_processing(source.feed_url, len(items))

        for item in items:
            try:
                if deduplicator.is_duplicate(item):
                    logger.log_duplicate_skipped(item.title, item.link)
                    metrics["items_deduplicated"] += 1
                    continue
                added = writer.add_item(item)
            except Exception as e:
                # e.g. markup the HTML parser rejects
                error_msg = f"Failed to process item '{item.title}': {e}"
                logger.error(error_msg, item_title=item.title, error=str(e))
                metrics["errors"].append(error_msg)
                metrics["items_failed"] += 1
                continue

            if added:
                metrics["items_added"] += 1
            else:
                metrics["items_failed"] += 1
                metrics["errors"].append(f"Failed to add item: {item.title}")

    return True
