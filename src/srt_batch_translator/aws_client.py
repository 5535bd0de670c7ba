"""Async client for the AWS Translate TranslateText API.

Requests are signed with :mod:`.signer` and sent with ``httpx.AsyncClient``.
Every call gets a fresh timestamp and signature. Calls are not retried; a
failed call fails the job that made it.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional
from datetime import datetime

import httpx

from .backends import TextBackend
from .exceptions import BackendUnavailable, EmptyResponse
from .signer import Credentials, sign_request, utc_now

logger = logging.getLogger(__name__)

SERVICE = "translate"
TARGET = "AWSShineFrontendService_20170701.TranslateText"
CONTENT_TYPE = "application/x-amz-json-1.1"
DEFAULT_REGION = "us-east-1"
# Conservative limit, the API accepts up to 10,000 bytes per request
DEFAULT_MAX_PAYLOAD_BYTES = 4000


class AwsTranslateClient(TextBackend):
    """
    AWS Translate backend.

    Use as an async context manager, or call :meth:`aclose` when done.
    """

    name = "aws"

    def __init__(
        self,
        credentials: Credentials,
        region: str = DEFAULT_REGION,
        source_language: str = "en",
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.credentials = credentials
        self.region = region
        self.source_language = source_language
        self.max_payload_bytes = max_payload_bytes
        self.host = f"translate.{region}.amazonaws.com"
        self.endpoint = f"https://{self.host}/"
        self._clock = clock
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    async def __aenter__(self) -> "AwsTranslateClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_request(self, text: str, target_language: str) -> httpx.Request:
        """Build a signed TranslateText request."""
        body = json.dumps({
            "Text": text,
            "SourceLanguageCode": self.source_language,
            "TargetLanguageCode": target_language,
        }, ensure_ascii=False).encode("utf-8")

        signed = sign_request(
            method="POST",
            service=SERVICE,
            region=self.region,
            host=self.host,
            path="/",
            payload=body,
            credentials=self.credentials,
            timestamp=self._clock(),
            content_type=CONTENT_TYPE,
        )

        headers = dict(signed.headers)
        headers["X-Amz-Target"] = TARGET
        return self._client.build_request("POST", self.endpoint, content=body, headers=headers)

    async def translate_text(self, text: str, target_language: str) -> str:
        """
        Translate ``text`` into ``target_language``.

        Raises:
            BackendUnavailable: non-200 status or transport failure
            EmptyResponse: 200 without a ``TranslatedText`` string
        """
        logger.debug(f"Translating {len(text)} characters to {target_language}")
        request = self.build_request(text, target_language)

        try:
            response = await self._client.send(request)
        except httpx.HTTPError as e:
            raise BackendUnavailable(f"AWS Translate request failed: {e}") from e

        if response.status_code != 200:
            raise BackendUnavailable(
                f"AWS Translate returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise EmptyResponse(f"AWS Translate returned invalid JSON: {e}") from e

        translated = data.get("TranslatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str) or not translated:
            raise EmptyResponse("AWS Translate response has no TranslatedText")

        return translated
