"""CDN cache invalidation collaborators.

Invalidation is best-effort from the orchestrator's point of view: the
objects are already published, and stale copies expire with their TTL
even if the purge request fails.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from botocore.exceptions import BotoCoreError, ClientError

from envship.core.errors import InvalidationFailedError

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheInvalidator(Protocol):
    """Protocol for CDN invalidation backends."""

    def invalidate(self, distribution_id: str, paths: Sequence[str]) -> str:
        """Request a purge of ``paths`` and return the invalidation id.

        Raises ``InvalidationFailedError`` on failure. The purge itself
        completes asynchronously.
        """
        ...


class CloudFrontInvalidator:
    """Issues CloudFront ``CreateInvalidation`` requests.

    Parameters
    ----------
    cloudfront_client:
        A boto3 CloudFront client.
    """

    def __init__(self, cloudfront_client: Any) -> None:
        self._cloudfront = cloudfront_client

    def invalidate(self, distribution_id: str, paths: Sequence[str]) -> str:
        items = ["/" + p.lstrip("/") for p in paths]
        try:
            response = self._cloudfront.create_invalidation(
                DistributionId=distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(items), "Items": items},
                    "CallerReference": f"envship-{uuid.uuid4().hex}",
                },
            )
        except (ClientError, BotoCoreError) as exc:
            raise InvalidationFailedError(
                f"CloudFront invalidation for {distribution_id} failed: {exc}"
            ) from exc

        try:
            invalidation_id = response["Invalidation"]["Id"]
        except (KeyError, TypeError) as exc:
            raise InvalidationFailedError(
                f"CloudFront returned no invalidation id for {distribution_id}: {response!r}"
            ) from exc
        logger.info(
            "CloudFront invalidation %s created for %s (%d path(s))",
            invalidation_id,
            distribution_id,
            len(items),
        )
        return invalidation_id
