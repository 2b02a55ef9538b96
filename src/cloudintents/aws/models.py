"""
AWS account and credential models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AWSAccount:
    """IAM Roles Anywhere configuration for one AWS account."""

    trust_anchor_arn: str
    profile_arn: str
    role_arn: str


@dataclass(frozen=True)
class Credentials:
    """Temporary AWS credentials returned by a session exchange."""

    access_key_id: str
    secret_access_key: str
    session_token: str
    expiry: datetime
    can_expire: bool = True

    def to_metadata(self) -> dict[str, Any]:
        """Metadata dict in the shape botocore's RefreshableCredentials expects."""
        return {
            "access_key": self.access_key_id,
            "secret_key": self.secret_access_key,
            "token": self.session_token,
            "expiry_time": self.expiry.isoformat(),
        }
