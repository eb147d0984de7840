"""Unit tests for the mirror publishers.

The S3 publisher runs against moto's in-memory S3.
"""

from __future__ import annotations

from pathlib import Path

import boto3
import pytest
from botocore.stub import Stubber
from moto import mock_aws

from envship.core.errors import PublishFailedError
from envship.core.publisher import (
    NO_CACHE,
    LocalMirrorPublisher,
    Publisher,
    S3MirrorPublisher,
)

BUCKET = "app-deploy-qa-abc123"
SLOT = "assets/config/environment.json"


def _keys(client) -> set[str]:
    response = client.list_objects_v2(Bucket=BUCKET)
    return {obj["Key"] for obj in response.get("Contents", [])}


@pytest.fixture
def s3_client(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


# ---------------------------------------------------------------------------
# Test: S3
# ---------------------------------------------------------------------------


class TestS3MirrorPublisher:
    def test_uploads_every_file(self, s3_client, artifact_root: Path):
        report = S3MirrorPublisher(s3_client).publish(artifact_root, BUCKET)

        assert _keys(s3_client) == {"index.html", "main.js", "styles.css", SLOT}
        assert sorted(report.uploaded) == sorted(_keys(s3_client))
        assert report.deleted == []

    def test_deletes_stale_objects(self, s3_client, artifact_root: Path):
        s3_client.put_object(Bucket=BUCKET, Key="old-chunk.js", Body=b"stale")
        s3_client.put_object(Bucket=BUCKET, Key="assets/legacy.png", Body=b"stale")

        report = S3MirrorPublisher(s3_client).publish(artifact_root, BUCKET)

        assert "old-chunk.js" not in _keys(s3_client)
        assert "assets/legacy.png" not in _keys(s3_client)
        assert sorted(report.deleted) == ["assets/legacy.png", "old-chunk.js"]

    def test_unchanged_files_skipped(self, s3_client, artifact_root: Path):
        publisher = S3MirrorPublisher(s3_client, no_cache_keys=[SLOT, "index.html"])
        publisher.publish(artifact_root, BUCKET)

        report = publisher.publish(artifact_root, BUCKET)

        assert sorted(report.uploaded) == [SLOT, "index.html"]

    def test_content_type_and_cache_control(self, s3_client, artifact_root: Path):
        S3MirrorPublisher(s3_client, no_cache_keys=["/" + SLOT]).publish(artifact_root, BUCKET)

        config = s3_client.head_object(Bucket=BUCKET, Key=SLOT)
        page = s3_client.head_object(Bucket=BUCKET, Key="index.html")
        assert config["ContentType"] == "application/json"
        assert config["CacheControl"] == NO_CACHE
        assert page["ContentType"] == "text/html"
        assert "CacheControl" not in page

    def test_missing_bucket(self, s3_client, artifact_root: Path):
        with pytest.raises(PublishFailedError) as excinfo:
            S3MirrorPublisher(s3_client).publish(artifact_root, "no-such-bucket")
        assert excinfo.value.step == "publish"

    def test_upload_denied(self, artifact_root: Path):
        client = boto3.client(
            "s3",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )
        with Stubber(client) as stubber:
            stubber.add_response("list_objects_v2", {"IsTruncated": False, "KeyCount": 0})
            stubber.add_client_error(
                "put_object",
                service_error_code="AccessDenied",
                service_message="Access Denied",
                http_status_code=403,
            )
            with pytest.raises(PublishFailedError, match="AccessDenied") as excinfo:
                S3MirrorPublisher(client).publish(artifact_root, BUCKET)
        assert excinfo.value.step == "publish"


# ---------------------------------------------------------------------------
# Test: local directory
# ---------------------------------------------------------------------------


class TestLocalMirrorPublisher:
    def test_mirror(self, tmp_path: Path, artifact_root: Path):
        publisher = LocalMirrorPublisher(tmp_path / "out")
        dest = publisher.destination_path("qa")
        (dest / "stale" / "deep").mkdir(parents=True)
        (dest / "stale" / "deep" / "old.js").write_text("old")
        (dest / "gone.txt").write_text("old")

        report = publisher.publish(artifact_root, "qa")

        published = sorted(
            p.relative_to(dest).as_posix() for p in dest.rglob("*") if p.is_file()
        )
        assert published == ["assets/config/environment.json", "index.html", "main.js", "styles.css"]
        assert sorted(report.deleted) == ["gone.txt", "stale/deep/old.js"]
        assert not (dest / "stale").exists()

    def test_contents_match(self, tmp_path: Path, artifact_root: Path):
        publisher = LocalMirrorPublisher(tmp_path / "out")
        publisher.publish(artifact_root, "qa")
        dest = publisher.destination_path("qa")
        assert (dest / "main.js").read_bytes() == (artifact_root / "main.js").read_bytes()

    def test_satisfies_protocol(self, tmp_path: Path, s3_client):
        assert isinstance(LocalMirrorPublisher(tmp_path), Publisher)
        assert isinstance(S3MirrorPublisher(s3_client), Publisher)
