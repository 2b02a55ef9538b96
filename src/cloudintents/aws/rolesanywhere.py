"""
Temporary AWS credentials through IAM Roles Anywhere.

Exchanges an X.509 certificate and its EC private key for a short-lived
credential set by calling the Roles Anywhere CreateSession API with an
AWS4-X509-ECDSA-SHA256 signed request.

The exchanger neither retries nor caches. Callers that need amortized
cost wrap it, e.g. with refreshable_credentials() which hands refresh and
its locking to botocore.
"""

from __future__ import annotations

import re
import ssl
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

import httpx
from botocore.credentials import RefreshableCredentials
from botocore.utils import ArnParser, InvalidArnException
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from cloudintents.aws.models import AWSAccount, Credentials
from cloudintents.aws.signing import X509RequestAuth
from cloudintents.core.errors import ExternalServiceError, ValidationError
from cloudintents.logging import bind_context

SESSION_DURATION_SECONDS = 12 * 60 * 60

DEFAULT_ENDPOINT_TEMPLATE = "https://rolesanywhere.{region}.amazonaws.com"

# RFC 3339 date-time: full date, "T", time, optional fraction, Z or offset
_RFC3339 = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)

_PEM_BLOCK = re.compile(rb"-----BEGIN ([A-Z0-9 ]+)-----.+?-----END \1-----", re.DOTALL)


def _read_file(path: str, what: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ValidationError(f"Failed to read {what} file: {e}", {"path": path}) from e


def load_certificate(path: str) -> x509.Certificate:
    """
    Load a single PEM certificate.

    Raises:
        ValidationError: Unreadable file, no PEM block, more than one
            block, or an unparsable certificate
    """
    data = _read_file(path, "certificate")

    match = _PEM_BLOCK.search(data)
    if match is None:
        raise ValidationError("No PEM block found in certificate file", {"path": path})
    if data[match.end() :].strip():
        raise ValidationError("Multiple certificates found in certificate file", {"path": path})

    try:
        return x509.load_pem_x509_certificate(match.group(0))
    except ValueError as e:
        raise ValidationError(f"Failed to parse certificate: {e}", {"path": path}) from e


def load_ec_private_key(path: str) -> ec.EllipticCurvePrivateKey:
    """
    Load a PEM private key that must be an elliptic curve key.

    Raises:
        ValidationError: Unreadable or unparsable file, or a non-EC key
    """
    data = _read_file(path, "private key")

    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"Failed to parse private key: {e}", {"path": path}) from e

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ValidationError(
            "Private key must be an ECDSA key",
            {"path": path, "key_type": type(key).__name__},
        )
    return key


def account_region(account: AWSAccount) -> str:
    """
    Region shared by the account's trust anchor and profile.

    Raises:
        ValidationError: Malformed ARN, or trust anchor and profile in
            different regions
    """
    parser = ArnParser()
    try:
        trust_anchor = parser.parse_arn(account.trust_anchor_arn)
        profile = parser.parse_arn(account.profile_arn)
    except InvalidArnException as e:
        raise ValidationError(f"Invalid ARN: {e}") from e

    if trust_anchor["region"] != profile["region"]:
        raise ValidationError(
            "Trust anchor and profile must be in the same region",
            {
                "trust_anchor_region": trust_anchor["region"],
                "profile_region": profile["region"],
            },
        )
    return trust_anchor["region"]


def parse_expiration(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp such as 2024-05-01T12:00:00Z.

    Other ISO 8601 forms (basic format, space separator, no offset) are
    rejected.

    Raises:
        ValidationError: Value is not an RFC 3339 date-time
    """
    if not isinstance(value, str) or _RFC3339.fullmatch(value) is None:
        raise ValidationError(f"Expiration time is not RFC 3339: {value!r}")
    # datetime carries microseconds at most
    normalized = re.sub(r"(\.\d{6})\d+", r"\1", value.upper().replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(normalized)
    except ValueError as e:
        raise ValidationError(f"Failed to parse expiration time: {value!r}") from e


def _tls_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


@dataclass
class RolesAnywhereCredentialExchanger:
    """
    Exchanges certificate + key for temporary AWS credentials.

    Stateless; a single instance can be shared between threads.

    Attributes:
        timeout: HTTP timeout in seconds
        endpoint_template: Roles Anywhere endpoint, formatted with region
    """

    timeout: float = 30.0
    endpoint_template: str = DEFAULT_ENDPOINT_TEMPLATE

    def exchange(self, certificate_path: str, private_key_path: str, account: AWSAccount) -> Credentials:
        """
        Create a Roles Anywhere session and return its credentials.

        All local validation happens before any network call.

        Raises:
            ValidationError: Bad certificate, key, account or expiration
            ExternalServiceError: CreateSession failed or returned no credentials
        """
        certificate = load_certificate(certificate_path)
        private_key = load_ec_private_key(private_key_path)
        region = account_region(account)

        log = bind_context(region=region, role_arn=account.role_arn)
        log.debug("rolesanywhere_session_requested", serial_number=certificate.serial_number)

        body = self._create_session(certificate, private_key, region, account)

        credential_sets = body.get("credentialSet") or []
        if not credential_sets:
            raise ExternalServiceError(
                "Unable to obtain temporary security credentials from CreateSession",
                {"profile_arn": account.profile_arn},
            )

        try:
            raw = credential_sets[0]["credentials"]
            access_key_id = raw["accessKeyId"]
            secret_access_key = raw["secretAccessKey"]
            session_token = raw["sessionToken"]
            expiration = raw["expiration"]
        except (KeyError, TypeError) as e:
            raise ExternalServiceError(f"Malformed CreateSession response: missing {e}") from e

        credentials = Credentials(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            expiry=parse_expiration(expiration),
            can_expire=True,
        )
        log.info(
            "rolesanywhere_session_created",
            access_key_id=credentials.access_key_id,
            expiry=credentials.expiry.isoformat(),
        )
        return credentials

    def _create_session(
        self,
        certificate: x509.Certificate,
        private_key: ec.EllipticCurvePrivateKey,
        region: str,
        account: AWSAccount,
    ) -> dict[str, Any]:
        url = f"{self.endpoint_template.format(region=region).rstrip('/')}/sessions"
        payload = {
            "durationSeconds": SESSION_DURATION_SECONDS,
            "profileArn": account.profile_arn,
            "roleArn": account.role_arn,
            "trustAnchorArn": account.trust_anchor_arn,
        }

        try:
            with httpx.Client(verify=_tls_context(), timeout=self.timeout) as http:
                response = http.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json", "User-Agent": "cloudintents"},
                    auth=X509RequestAuth(certificate, private_key, region),
                )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to create session: {e}", {"url": url}) from e

        if not response.is_success:
            raise ExternalServiceError(
                f"Failed to create session: HTTP {response.status_code}",
                {"url": url, "status": response.status_code, "body": response.text[:500]},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ExternalServiceError(f"Failed to decode CreateSession response: {e}") from e

        if not isinstance(body, dict):
            raise ExternalServiceError(
                "Malformed CreateSession response",
                {"url": url, "body_type": type(body).__name__},
            )
        return body


def credentials_provider(
    certificate_path: str,
    private_key_path: str,
    account: AWSAccount,
    exchanger: RolesAnywhereCredentialExchanger | None = None,
) -> Callable[[], Credentials]:
    """Bind paths and account into a zero-argument credentials callable."""
    exchanger = exchanger or RolesAnywhereCredentialExchanger()

    def provide() -> Credentials:
        return exchanger.exchange(certificate_path, private_key_path, account)

    return provide


def refreshable_credentials(
    certificate_path: str,
    private_key_path: str,
    account: AWSAccount,
    exchanger: RolesAnywhereCredentialExchanger | None = None,
) -> RefreshableCredentials:
    """
    botocore credentials that re-run the exchange shortly before expiry.

    botocore serializes refreshes behind its own lock, so concurrent users
    of the returned object share one in-flight exchange.
    """
    provide = credentials_provider(certificate_path, private_key_path, account, exchanger)

    def refresh() -> dict[str, Any]:
        return provide().to_metadata()

    return RefreshableCredentials.create_from_metadata(
        metadata=refresh(),
        refresh_using=refresh,
        method="rolesanywhere",
    )
