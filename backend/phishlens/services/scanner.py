# backend/phishlens/services/scanner.py
import logging
from typing import List, Optional, Protocol, Tuple

from ..errors import ExternalServiceError
from ..utils.extractor import MAX_URLS, extract_urls, normalize_candidate

logger = logging.getLogger("phishlens.analyze")


class ReputationClient(Protocol):
    async def analyze(self, url: str) -> Optional[dict]:
        ...


class ScanOrchestrator:
    """
    Runs URLs through the reputation provider(s).

    Email candidates are submitted one after another, never concurrently, so a
    single email costs at most ``max_urls`` provider round trips in sequence.
    """

    def __init__(
        self,
        reputation: ReputationClient,
        urlscan: Optional[ReputationClient] = None,
        max_urls: int = MAX_URLS,
    ):
        self.reputation = reputation
        self.urlscan = urlscan
        self.max_urls = max_urls

    async def analyze_url(self, url: str) -> dict:
        """Single URL. Provider failures propagate as ``ExternalServiceError``."""
        result = {"url": url, "virusTotal": await self.reputation.analyze(url)}
        if self.urlscan is not None:
            result["urlscan"] = await self.urlscan.analyze(url)
        return result

    async def analyze_email(self, text: str) -> Tuple[List[str], List[dict]]:
        extracted = extract_urls(text, limit=self.max_urls)

        analyses = []
        for candidate in extracted:
            normalized = normalize_candidate(candidate)
            try:
                vt = await self.reputation.analyze(normalized)
            except ExternalServiceError as e:
                logger.warning("Candidate %s failed: %s", candidate, e.details)
                analyses.append({"url": candidate, "error": e.details})
                continue
            analyses.append({"url": normalized, "virusTotal": vt})

        return extracted, analyses
