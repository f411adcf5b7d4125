"""AWS Lambda entry point for Notion Feeder."""

import json
from datetime import UTC, datetime
from typing import Any

import boto3
from botocore.exceptions import ClientError

from .config import Config
from .feeder import build_components, new_metrics, run_feeder
from .logging_config import (
    create_execution_logger,
    resolve_log_level,
    setup_structured_logging,
)
from .notion import NotionClient

MODES = ("all", "ingest", "prune")
METRICS_NAMESPACE = "Notion-Feeder"


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Main Lambda handler that runs one feeder pass.

    The event may carry ``{"mode": "all" | "ingest" | "prune"}``; the
    default runs ingestion followed by pruning.

    Args:
        event: Lambda event data
        context: Lambda context object

    Returns:
        Response dictionary with status and metrics
    """
    execution_id = f"lambda_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)
    metrics = new_metrics()
    config = None

    try:
        config = Config()
        setup_structured_logging(resolve_log_level(config.ci, config.log_level))

        main_logger.log_execution_start(
            lambda_request_id=getattr(context, "aws_request_id", "unknown"),
            lambda_function_name=getattr(context, "function_name", "unknown"),
        )

        mode = (event or {}).get("mode", "all")
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}, expected one of {MODES}")

        config.validate()
        token = config.notion_api_token
        if not token.strip():
            token = get_notion_token(
                config.notion_secret_name, config.aws_region, execution_id
            )

        notion_config = config.get_notion_config(api_token=token)
        client = NotionClient(
            notion_config.api_token,
            timeout=notion_config.timeout,
            notion_version=notion_config.notion_version,
            execution_id=execution_id,
        )
        components = build_components(config, client, execution_id)

        metrics = run_feeder(
            components.registry if mode != "prune" else None,
            components.processor,
            components.deduplicator,
            components.writer,
            pruner=components.pruner if mode != "ingest" else None,
            logger=main_logger,
        )

        if config.publish_metrics:
            send_cloudwatch_metrics(metrics, config.aws_region, execution_id)

        success = not metrics["aborted"]
        main_logger.log_execution_end(success=success, metrics=metrics)

        return {
            "statusCode": 200 if success else 500,
            "body": json.dumps(
                {
                    "message": "Notion Feeder execution completed"
                    if success
                    else "Notion Feeder execution aborted",
                    "execution_id": execution_id,
                    "metrics": metrics,
                }
            ),
        }

    except Exception as e:
        error_msg = f"Critical error in Lambda handler: {str(e)}"
        main_logger.error(error_msg, error=str(e))
        metrics["errors"].append(error_msg)
        metrics["aborted"] = True

        if config is not None and config.publish_metrics:
            send_cloudwatch_metrics(metrics, config.aws_region, execution_id)

        main_logger.log_execution_end(success=False, metrics=metrics, error=error_msg)

        return {
            "statusCode": 500,
            "body": json.dumps(
                {
                    "message": "Notion Feeder execution failed",
                    "execution_id": execution_id,
                    "error": error_msg,
                    "metrics": metrics,
                }
            ),
        }


def get_notion_token(secret_name: str, aws_region: str, execution_id: str) -> str:
    """
    Retrieve the Notion integration token from AWS Secrets Manager.

    Supports both plain string secrets and JSON objects holding the token
    under a common key. The token itself is never logged.

    Args:
        secret_name: Name of the secret in Secrets Manager
        aws_region: AWS region for Secrets Manager client
        execution_id: Execution ID for logging context

    Returns:
        Notion integration token

    Raises:
        RuntimeError: If the secret cannot be retrieved or is malformed
        ValueError: If secret name or region are empty
    """
    secrets_logger = create_execution_logger("secrets_manager", execution_id)

    if not secret_name or not secret_name.strip():
        raise ValueError("Secret name cannot be empty")

    if not aws_region or not aws_region.strip():
        raise ValueError("AWS region cannot be empty")

    try:
        secrets_logger.info(f"Retrieving Notion token from Secrets Manager: {secret_name}")
        secrets_client = boto3.client("secretsmanager", region_name=aws_region)

        response = secrets_client.get_secret_value(SecretId=secret_name)

        if "SecretString" not in response:
            raise ValueError(f"Secret {secret_name} does not contain a string value")

        secret_value = response["SecretString"]

        if not secret_value or not secret_value.strip():
            raise ValueError(f"Secret {secret_name} contains empty value")

        try:
            secret_data = json.loads(secret_value)
        except json.JSONDecodeError:
            secrets_logger.info("Retrieved token from plain text secret")
            return secret_value.strip()

        if not isinstance(secret_data, dict):
            raise ValueError(f"JSON secret {secret_name} must be an object")

        for key in ["token", "notion_token", "notion_api_token", "api_token"]:
            value = secret_data.get(key)
            if isinstance(value, str) and value.strip():
                secrets_logger.info("Retrieved token from JSON secret")
                return value.strip()

        raise ValueError(f"No token found in JSON secret {secret_name}")

    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        secrets_logger.error(
            f"AWS Secrets Manager error retrieving {secret_name}: {error_code}"
        )
        raise RuntimeError(f"Failed to retrieve secret {secret_name}") from e
    except ValueError as e:
        secrets_logger.error(f"Invalid secret format for {secret_name}: {e}")
        raise RuntimeError(f"Invalid secret format for {secret_name}") from e


def send_cloudwatch_metrics(
    metrics: dict[str, Any], aws_region: str, execution_id: str
) -> None:
    """
    Send run metrics to CloudWatch. Failures are logged, never raised.

    Args:
        metrics: Dictionary containing execution metrics
        aws_region: AWS region for CloudWatch client
        execution_id: Execution ID for logging context
    """
    metrics_logger = create_execution_logger("cloudwatch_metrics", execution_id)

    try:
        cloudwatch = boto3.client("cloudwatch", region_name=aws_region)

        total_errors = len(metrics["errors"])
        execution_success = not metrics["aborted"] and total_errors == 0
        dimensions = [{"Name": "ExecutionId", "Value": execution_id}]

        counters = {
            "FeedsProcessed": metrics["feeds_processed"],
            "FeedsFailed": metrics["feeds_failed"],
            "ItemsFound": metrics["items_found"],
            "ItemsAdded": metrics["items_added"],
            "ItemsDeduplicated": metrics["items_deduplicated"],
            "ItemsArchived": metrics["items_archived"],
            "Errors": total_errors,
        }
        metric_data = [
            {"MetricName": name, "Value": value, "Unit": "Count", "Dimensions": dimensions}
            for name, value in counters.items()
        ]
        metric_data.append(
            {
                "MetricName": "ExecutionSuccess",
                "Value": 1 if execution_success else 0,
                "Unit": "Count",
                "Dimensions": [
                    {
                        "Name": "Status",
                        "Value": "Success" if execution_success else "Failure",
                    }
                ],
            }
        )

        # CloudWatch accepts at most 20 metrics per call
        batch_size = 20
        for i in range(0, len(metric_data), batch_size):
            batch = metric_data[i : i + batch_size]
            cloudwatch.put_metric_data(Namespace=METRICS_NAMESPACE, MetricData=batch)

        metrics_logger.info(
            "Successfully sent metrics to CloudWatch",
            metrics_sent=len(metric_data),
            namespace=METRICS_NAMESPACE,
            execution_success=execution_success,
        )

    except Exception as e:
        metrics_logger.error(f"Failed to send CloudWatch metrics: {e}", error=str(e))
