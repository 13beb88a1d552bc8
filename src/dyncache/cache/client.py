"""
boto3 client factory.

Timeouts and retries live in the botocore client config; the cache layer
itself never retries.
"""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from dyncache.config import Settings
from dyncache.logging import get_logger

logger = get_logger(__name__)


def create_dynamodb_client(settings: Settings, session: boto3.session.Session | None = None) -> Any:
    """Create a low-level DynamoDB client from settings.

    Args:
        settings: Cache settings (region, endpoint, timeouts, retries).
        session: Optional boto3 session; the default session is used otherwise.

    Returns:
        A boto3 DynamoDB client.
    """
    config = Config(
        connect_timeout=settings.CONNECT_TIMEOUT_S,
        read_timeout=settings.READ_TIMEOUT_S,
        retries={"max_attempts": settings.MAX_ATTEMPTS, "mode": "standard"},
    )
    factory = session.client if session is not None else boto3.client

    logger.debug(
        "Creating DynamoDB client",
        region=settings.AWS_REGION,
        endpoint_url=settings.ENDPOINT_URL,
    )
    return factory(
        "dynamodb",
        region_name=settings.AWS_REGION,
        endpoint_url=settings.ENDPOINT_URL,
        config=config,
    )
