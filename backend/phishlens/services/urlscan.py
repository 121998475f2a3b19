# backend/phishlens/services/urlscan.py
import logging
from typing import Optional

import httpx

from ..errors import ExternalServiceError
from .virustotal import provider_error_details

logger = logging.getLogger("phishlens.urlscan")

PROVIDER = "URLScan"


class URLScanClient:
    """
    urlscan.io submission plus a single result fetch.

    Scans usually take several seconds, so the immediate fetch often 404s;
    that yields a ``pending`` marker the caller can show instead of failing.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://urlscan.io/api/v1",
        visibility: str = "private",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.visibility = visibility
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def analyze(self, url: str) -> Optional[dict]:
        async with self._client() as client:
            try:
                r = await client.post(
                    "/scan/",
                    json={"url": url, "visibility": self.visibility},
                    headers={"API-Key": self.api_key},
                )
                r.raise_for_status()
                submission = r.json()
            except (httpx.HTTPError, ValueError) as e:
                details = provider_error_details(e)
                logger.warning("URLScan submit failed for %s: %s", url, details)
                raise ExternalServiceError(PROVIDER, details) from e

            uuid = submission.get("uuid") if isinstance(submission, dict) else None
            if not uuid:
                return submission

            try:
                r = await client.get(f"/result/{uuid}/")
                r.raise_for_status()
                return r.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.info("URLScan result %s not ready: %s", uuid, e)
                return {
                    "pending": True,
                    "uuid": uuid,
                    "message": "Result not ready yet. Try again shortly.",
                }
