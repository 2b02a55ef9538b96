"""AWS IAM Roles Anywhere credential exchange."""

from cloudintents.aws.models import AWSAccount, Credentials
from cloudintents.aws.rolesanywhere import (
    SESSION_DURATION_SECONDS,
    RolesAnywhereCredentialExchanger,
    account_region,
    credentials_provider,
    load_certificate,
    load_ec_private_key,
    parse_expiration,
    refreshable_credentials,
)
from cloudintents.aws.signing import X509RequestAuth

__all__ = [
    "AWSAccount",
    "Credentials",
    "RolesAnywhereCredentialExchanger",
    "SESSION_DURATION_SECONDS",
    "X509RequestAuth",
    "account_region",
    "credentials_provider",
    "load_certificate",
    "load_ec_private_key",
    "parse_expiration",
    "refreshable_credentials",
]
