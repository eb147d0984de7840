"""Operator settings — env-driven, one file per workstation or CI runner.

Centralized settings using pydantic-settings. Reads from a .env file and
ENVSHIP_* environment variables. These describe *where* environments are
deployed (buckets, CDN distribution, build command); what each environment
*is* lives in its own configuration document.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class DeploySettings(BaseSettings):
    """Deployment settings with environment variable overrides.

    All settings can be overridden via ENVSHIP_* environment variables
    or a .env file in the project root.

    Examples
    --------
    Override via environment::

        export ENVSHIP_UNIQUE_ID=a1b2c3
        export ENVSHIP_CLOUDFRONT_DISTRIBUTION_ID=E2QWRUHAPOMQZL
        export ENVSHIP_LOG_LEVEL=DEBUG

    Or via .env file::

        ENVSHIP_UNIQUE_ID=a1b2c3
        ENVSHIP_CLOUDFRONT_DOMAIN=d111111abcdef8.cloudfront.net
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ENVSHIP_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Bucket naming: {bucket_prefix}-{env short name}-{unique_id}
    unique_id: str = ""
    bucket_prefix: str = "app-deploy"

    # AWS
    aws_region: str = "us-east-1"
    aws_profile: str | None = None
    aws_endpoint_url: str | None = None  # local S3 emulators only
    cloudfront_distribution_id: str = ""
    cloudfront_domain: str = ""

    # Source tree and build
    project_dir: Path = Path(".")
    source_config_dir: Path = Path("src/assets/config")
    artifact_dir: Path = Path("dist/browser")
    build_command: str = "npm run build -- --configuration=production"

    # Fixed paths inside the artifact
    config_document_path: str = "assets/config/environment.json"
    entry_document: str = "index.html"

    # Observability
    log_level: str = "INFO"

    # Runtime loader
    config_fetch_timeout_seconds: float = 10.0

    @property
    def has_edge_cache(self) -> bool:
        """Whether a CDN distribution is configured for the edge-cached target."""
        return bool(self.cloudfront_distribution_id)
