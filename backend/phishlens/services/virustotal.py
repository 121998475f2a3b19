# backend/phishlens/services/virustotal.py
import logging
from typing import Any, Optional

import httpx

from ..errors import ExternalServiceError

logger = logging.getLogger("phishlens.virustotal")

PROVIDER = "VirusTotal"


def provider_error_details(exc: Exception) -> Any:
    """Provider error body when there is one, else the exception message."""
    response = getattr(exc, "response", None)
    if isinstance(exc, httpx.HTTPStatusError) and response is not None:
        try:
            return response.json()
        except ValueError:
            return response.text or str(exc)
    return str(exc)


def _data(r: httpx.Response) -> Optional[dict]:
    body = r.json()
    data = body.get("data") if isinstance(body, dict) else None
    return data if isinstance(data, dict) else None


class VirusTotalClient:
    """
    VirusTotal v3 URL analysis.

    ``analyze`` submits the URL, then fetches the analysis exactly once. The
    analysis may still be queued on VirusTotal's side; that is returned as-is.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.virustotal.com/api/v3",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"x-apikey": self.api_key},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def analyze(self, url: str) -> Optional[dict]:
        if not self.api_key:
            raise ExternalServiceError(PROVIDER, "VIRUSTOTAL_API_KEY is not configured")

        try:
            async with self._client() as client:
                r = await client.post("/urls", data={"url": url})
                r.raise_for_status()
                analysis_id = (_data(r) or {}).get("id")

                if not analysis_id:
                    return None

                r = await client.get(f"/analyses/{analysis_id}")
                r.raise_for_status()
                return _data(r) or None

        except (httpx.HTTPError, ValueError) as e:
            details = provider_error_details(e)
            logger.warning("VirusTotal error for %s: %s", url, details)
            raise ExternalServiceError(PROVIDER, details) from e
