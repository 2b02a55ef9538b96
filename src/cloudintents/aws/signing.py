"""
AWS4-X509-ECDSA-SHA256 request signing for IAM Roles Anywhere.

Roles Anywhere authenticates CreateSession with a SigV4-style signature
made by the private key of an X.509 certificate instead of a secret access
key. The canonical request and credential scope follow SigV4; the string
to sign is signed with ECDSA over SHA-256 and the credential field carries
the certificate serial number.
"""

from __future__ import annotations

import base64
import hashlib
from datetime import datetime, timezone
from typing import Callable, Generator
from urllib.parse import quote

import httpx
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

ALGORITHM = "AWS4-X509-ECDSA-SHA256"
SERVICE_NAME = "rolesanywhere"

AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
SCOPE_DATE_FORMAT = "%Y%m%d"

SIGNED_HEADERS = ("content-type", "host", "x-amz-date", "x-amz-x509")


def encode_certificate(certificate: x509.Certificate) -> str:
    """Base64 of the DER encoded certificate, as sent in X-Amz-X509."""
    return base64.b64encode(certificate.public_bytes(serialization.Encoding.DER)).decode("ascii")


def credential_scope(timestamp: datetime, region: str) -> str:
    return f"{timestamp.strftime(SCOPE_DATE_FORMAT)}/{region}/{SERVICE_NAME}/aws4_request"


def _canonical_query(request: httpx.Request) -> str:
    params = sorted(request.url.params.multi_items())
    return "&".join(f"{quote(k, safe='-_.~')}={quote(v, safe='-_.~')}" for k, v in params)


def canonical_request(request: httpx.Request, signed_headers: tuple[str, ...] = SIGNED_HEADERS) -> str:
    """Build the SigV4 canonical request for an httpx request."""
    canonical_headers = "".join(
        f"{name}:{' '.join(request.headers.get(name, '').split())}\n" for name in signed_headers
    )
    payload_hash = hashlib.sha256(request.content).hexdigest()
    return "\n".join(
        [
            request.method,
            quote(request.url.path or "/", safe="/-_.~"),
            _canonical_query(request),
            canonical_headers,
            ";".join(signed_headers),
            payload_hash,
        ]
    )


def string_to_sign(canonical: str, amz_date: str, scope: str) -> str:
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return "\n".join([ALGORITHM, amz_date, scope, digest])


class X509RequestAuth(httpx.Auth):
    """httpx auth flow that signs requests with a certificate's EC key."""

    requires_request_body = True

    def __init__(
        self,
        certificate: x509.Certificate,
        private_key: ec.EllipticCurvePrivateKey,
        region: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.certificate = certificate
        self.private_key = private_key
        self.region = region
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self.sign(request)
        yield request

    def sign(self, request: httpx.Request) -> None:
        """Add X-Amz-Date, X-Amz-X509 and Authorization headers in place."""
        timestamp = self._clock()
        amz_date = timestamp.strftime(AMZ_DATE_FORMAT)
        scope = credential_scope(timestamp, self.region)

        request.headers["X-Amz-Date"] = amz_date
        request.headers["X-Amz-X509"] = encode_certificate(self.certificate)

        to_sign = string_to_sign(canonical_request(request), amz_date, scope)
        signature = self.private_key.sign(to_sign.encode("utf-8"), ec.ECDSA(hashes.SHA256()))

        request.headers["Authorization"] = (
            f"{ALGORITHM} Credential={self.certificate.serial_number}/{scope}, "
            f"SignedHeaders={';'.join(SIGNED_HEADERS)}, "
            f"Signature={signature.hex()}"
        )
