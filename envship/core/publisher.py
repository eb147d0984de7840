"""Mirror publishers — make a destination match the artifact tree exactly.

Mirror semantics: every file in the tree is present at the destination
after a successful publish, and every destination object that is not in
the tree is deleted. A failure part-way leaves the destination mixed; the
caller is told via ``PublishFailedError`` and nothing is rolled back.
"""

from __future__ import annotations

import hashlib
import logging
import mimetypes
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from envship.core.errors import PublishFailedError
from envship.models.deployment import PublishReport

logger = logging.getLogger(__name__)

NO_CACHE = "no-cache, no-store, must-revalidate"
_DELETE_BATCH = 1000  # S3 DeleteObjects limit


@runtime_checkable
class Publisher(Protocol):
    """Protocol for mirror publish backends."""

    def publish(self, source_root: Path, destination: str) -> PublishReport:
        """Mirror ``source_root`` to ``destination``.

        Raises ``PublishFailedError`` on any failure.
        """
        ...


def _local_files(root: Path) -> list[str]:
    return sorted(
        p.relative_to(root).as_posix() for p in Path(root).rglob("*") if p.is_file()
    )


def _md5_hex(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


# ---------------------------------------------------------------------------
# S3
# ---------------------------------------------------------------------------


class S3MirrorPublisher:
    """Mirrors a tree into an S3 bucket (``aws s3 sync --delete``).

    Objects whose ETag already matches the local file's MD5 are left in
    place. Keys listed in ``no_cache_keys`` are uploaded with a
    ``Cache-Control`` header that keeps browsers and CDNs from holding on
    to them.

    Parameters
    ----------
    s3_client:
        A boto3 S3 client.
    no_cache_keys:
        Object keys that must never be cached (config document, entry page).
    """

    def __init__(self, s3_client: Any, no_cache_keys: Iterable[str] = ()) -> None:
        self._s3 = s3_client
        self._no_cache = {k.lstrip("/") for k in no_cache_keys}

    def publish(self, source_root: Path, destination: str) -> PublishReport:
        source_root = Path(source_root)
        local = _local_files(source_root)
        uploaded: list[str] = []
        deleted: list[str] = []

        try:
            remote = self._list_etags(destination)

            for key in local:
                path = source_root / key
                if remote.get(key) == _md5_hex(path) and key not in self._no_cache:
                    continue
                self._s3.upload_file(
                    str(path), destination, key, ExtraArgs=self._extra_args(key)
                )
                uploaded.append(key)

            stale = sorted(set(remote) - set(local))
            for start in range(0, len(stale), _DELETE_BATCH):
                batch = stale[start:start + _DELETE_BATCH]
                response = self._s3.delete_objects(
                    Bucket=destination,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
                errors = response.get("Errors", [])
                if errors:
                    first = errors[0]
                    raise PublishFailedError(
                        f"Failed to delete {len(errors)} stale object(s) from "
                        f"{destination}, first: {first.get('Key')} ({first.get('Message')})"
                    )
                deleted.extend(batch)
        except (ClientError, BotoCoreError, S3UploadFailedError, OSError) as exc:
            raise PublishFailedError(
                f"Publish to s3://{destination} failed after {len(uploaded)} upload(s): {exc}"
            ) from exc

        logger.info(
            "Published to s3://%s: %d uploaded, %d deleted, %d unchanged",
            destination,
            len(uploaded),
            len(deleted),
            len(local) - len(uploaded),
        )
        return PublishReport(destination=destination, uploaded=uploaded, deleted=deleted)

    def _list_etags(self, bucket: str) -> dict[str, str]:
        """Return ``{key: etag}`` for every object in the bucket."""
        etags: dict[str, str] = {}
        paginator = self._s3.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket):
            for obj in page.get("Contents", []):
                etags[obj["Key"]] = obj.get("ETag", "").strip('"')
        return etags

    def _extra_args(self, key: str) -> dict[str, str]:
        content_type, _ = mimetypes.guess_type(key)
        extra = {"ContentType": content_type or "application/octet-stream"}
        if key in self._no_cache:
            extra["CacheControl"] = NO_CACHE
        return extra


# ---------------------------------------------------------------------------
# Local directory
# ---------------------------------------------------------------------------


class LocalMirrorPublisher:
    """Mirrors a tree into ``{root}/{destination}`` on the local filesystem.

    Useful for previews, static hosts backed by a shared volume, and tests.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def destination_path(self, destination: str) -> Path:
        return self.root / destination

    def publish(self, source_root: Path, destination: str) -> PublishReport:
        source_root = Path(source_root)
        dest = self.destination_path(destination)
        local = _local_files(source_root)
        uploaded: list[str] = []
        deleted: list[str] = []

        try:
            dest.mkdir(parents=True, exist_ok=True)
            for rel in local:
                target = dest / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source_root / rel, target)
                uploaded.append(rel)

            for rel in sorted(set(_local_files(dest)) - set(local)):
                (dest / rel).unlink()
                deleted.append(rel)

            # Drop directories left empty by deletions, deepest first.
            for directory in sorted(
                (p for p in dest.rglob("*") if p.is_dir()),
                key=lambda p: len(p.parts),
                reverse=True,
            ):
                if not any(directory.iterdir()):
                    directory.rmdir()
        except OSError as exc:
            raise PublishFailedError(f"Publish to {dest} failed: {exc}") from exc

        logger.info(
            "Published to %s: %d copied, %d deleted", dest, len(uploaded), len(deleted)
        )
        return PublishReport(destination=destination, uploaded=uploaded, deleted=deleted)
