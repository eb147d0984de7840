"""boto3 client construction from operator settings."""

from __future__ import annotations

import logging
from typing import Any

import boto3

from envship.config import DeploySettings

logger = logging.getLogger(__name__)


def make_client(service_name: str, settings: DeploySettings) -> Any:
    """Create a boto3 client for ``service_name``.

    Uses ``aws_profile`` when set (SSO / named profiles), otherwise the
    default credential chain. ``aws_endpoint_url`` is honoured for S3 only,
    so a local emulator can stand in for the bucket.
    """
    session = (
        boto3.Session(profile_name=settings.aws_profile)
        if settings.aws_profile
        else boto3.Session()
    )
    kwargs: dict[str, Any] = {"region_name": settings.aws_region}
    if settings.aws_endpoint_url and service_name == "s3":
        kwargs["endpoint_url"] = settings.aws_endpoint_url
    logger.debug(
        "Created %s client (region=%s, profile=%s)",
        service_name,
        settings.aws_region,
        settings.aws_profile or "default",
    )
    return session.client(service_name, **kwargs)
