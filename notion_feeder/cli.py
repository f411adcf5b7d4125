"""Command line entry point for Notion Feeder."""

import click
from dotenv import load_dotenv

from .config import Config
from .feeder import build_components, run_feeder
from .lambda_handler import get_notion_token
from .logging_config import (
    create_execution_logger,
    resolve_log_level,
    setup_structured_logging,
)
from .notion import NotionClient


def _run(ingest: bool, prune: bool) -> dict:
    load_dotenv()
    try:
        config = Config()
        config.validate()
    except ValueError as e:
        raise click.UsageError(str(e))

    setup_structured_logging(resolve_log_level(config.ci, config.log_level))
    logger = create_execution_logger("main")

    logger.info("Starting Notion Feeder...")
    token = config.notion_api_token
    if not token.strip():
        token = get_notion_token(
            config.notion_secret_name, config.aws_region, logger.execution_id
        )

    client = NotionClient(
        token,
        timeout=config.request_timeout,
        notion_version=config.notion_version,
        execution_id=logger.execution_id,
    )
    components = build_components(config, client, logger.execution_id)

    metrics = run_feeder(
        components.registry if ingest else None,
        components.processor,
        components.deduplicator,
        components.writer,
        pruner=components.pruner if prune else None,
        logger=logger,
    )
    logger.info("Finished processing feeds.")
    return metrics


@click.group()
@click.version_option(package_name="notion-feeder")
def cli():
    """Notion Feeder - mirror RSS/Atom items into a Notion reader database."""
    pass


@cli.command()
def run():
    """Add new feed items, then archive stale unread ones."""
    _run(ingest=True, prune=True)


@cli.command()
def ingest():
    """Add new feed items only."""
    _run(ingest=True, prune=False)


@cli.command()
def prune():
    """Archive unread items older than the retention window."""
    _run(ingest=False, prune=True)


def main():
    cli()
