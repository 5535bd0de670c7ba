"""AWS Signature Version 4 request signing.

Built directly on ``hashlib`` and ``hmac``. Signing is a pure function of its
inputs, the timestamp included, so a request must be signed again for every
call.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

ALGORITHM = "AWS4-HMAC-SHA256"
TERMINATOR = "aws4_request"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"


@dataclass(frozen=True)
class Credentials:
    """Access key pair with an optional session token."""

    access_key: str
    secret_key: str
    session_token: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(access_key={self.access_key!r}, secret_key='***')"


@dataclass(frozen=True)
class SignedRequest:
    """Signature and headers authorizing exactly one HTTP call."""

    amz_date: str
    credential_scope: str
    signature: str
    signed_headers: str
    headers: Dict[str, str] = field(default_factory=dict)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """Chain four HMACs: date, region, service, then the terminator."""
    k_date = hmac_sha256(("AWS4" + secret_key).encode("utf-8"), date_stamp)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, service)
    return hmac_sha256(k_service, TERMINATOR)


def _canonical_headers(headers: Dict[str, str]) -> tuple[str, str]:
    names: List[str] = sorted(headers)
    canonical = "".join(f"{name}:{headers[name].strip()}\n" for name in names)
    return canonical, ";".join(names)


def build_canonical_request(
    method: str,
    path: str,
    headers: Dict[str, str],
    payload_hash: str,
) -> tuple[str, str]:
    """
    Build the canonical request.

    Args:
        headers: Lowercase header names to sign

    Returns:
        (canonical request, signed header names)
    """
    canonical_headers, signed_headers = _canonical_headers(headers)
    canonical_request = "\n".join([
        method,
        path,
        "",  # no query string
        canonical_headers,
        signed_headers,
        payload_hash,
    ])
    return canonical_request, signed_headers


def build_string_to_sign(amz_date: str, credential_scope: str, canonical_request: str) -> str:
    return "\n".join([
        ALGORITHM,
        amz_date,
        credential_scope,
        sha256_hex(canonical_request.encode("utf-8")),
    ])


def sign_request(
    method: str,
    service: str,
    region: str,
    host: str,
    path: str,
    payload: Union[str, bytes],
    credentials: Credentials,
    timestamp: datetime,
    content_type: str = "application/x-amz-json-1.1",
) -> SignedRequest:
    """
    Sign one request with SigV4.

    Args:
        method: HTTP method, e.g. ``POST``
        service: Service name used in the credential scope, e.g. ``translate``
        region: AWS region, e.g. ``us-east-1``
        host: Request host header
        path: Request path, e.g. ``/``
        payload: Exact request body
        credentials: Access key, secret key and optional session token
        timestamp: Request time; naive values are taken as UTC

    Returns:
        SignedRequest whose ``headers`` must accompany the call
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    timestamp = timestamp.astimezone(timezone.utc)
    amz_date = timestamp.strftime(AMZ_DATE_FORMAT)
    date_stamp = timestamp.strftime(DATE_STAMP_FORMAT)

    headers = {
        "content-type": content_type,
        "host": host,
        "x-amz-date": amz_date,
    }
    if credentials.session_token:
        headers["x-amz-security-token"] = credentials.session_token

    canonical_request, signed_headers = build_canonical_request(
        method, path, headers, sha256_hex(payload)
    )

    credential_scope = f"{date_stamp}/{region}/{service}/{TERMINATOR}"
    string_to_sign = build_string_to_sign(amz_date, credential_scope, canonical_request)

    signing_key = derive_signing_key(credentials.secret_key, date_stamp, region, service)
    signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    authorization = (
        f"{ALGORITHM} Credential={credentials.access_key}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )

    out_headers = {
        "Content-Type": content_type,
        "X-Amz-Date": amz_date,
        "Authorization": authorization,
    }
    if credentials.session_token:
        out_headers["X-Amz-Security-Token"] = credentials.session_token

    return SignedRequest(
        amz_date=amz_date,
        credential_scope=credential_scope,
        signature=signature,
        signed_headers=signed_headers,
        headers=out_headers,
    )


def utc_now() -> datetime:
    """Fresh timestamp for a signature."""
    return datetime.now(timezone.utc)
