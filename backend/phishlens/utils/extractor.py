# backend/phishlens/utils/extractor.py
import re
from typing import List

# http(s):// or www. up to whitespace or one of <>)]
URL_REGEX = re.compile(r"(https?://[^\s<>)\]]+)|(www\.[^\s<>)\]]+)", re.IGNORECASE)

MAX_URLS = 5


def extract_urls(text: str, limit: int = MAX_URLS) -> List[str]:
    """
    Candidate URLs in order of first appearance, exact-string deduped,
    capped at ``limit``. Advisory only: no real URL parsing happens here.
    """
    if not text:
        return []
    found = [m.group(0) for m in URL_REGEX.finditer(text)]
    return list(dict.fromkeys(found))[:limit]


def normalize_candidate(candidate: str) -> str:
    # bare www. hosts get a scheme before submission
    return candidate if candidate.startswith("http") else f"http://{candidate}"
