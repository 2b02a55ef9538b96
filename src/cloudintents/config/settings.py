"""
Application settings using Pydantic.

Provides environment-based configuration loading with CLOUDINTENTS_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudintents.aws.models import AWSAccount


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLOUDINTENTS_",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Service identity resolution
    service_name_override_annotation: str | None = None
    use_image_name_for_service_id_for_jobs: bool = False

    # Kubernetes
    kubeconfig: str | None = None
    kube_context: str | None = None
    kube_timeout: float = 30.0

    # GCP
    gcp_project_id: str | None = None
    cluster_name: str | None = None

    # AWS IAM Roles Anywhere
    aws_certificate_path: str | None = None
    aws_private_key_path: str | None = None
    aws_accounts: list[AWSAccount] = []  # JSON list in the environment
    aws_session_timeout: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
