# backend/phishlens/services/history.py
from typing import List

from ..schemas import isoformat, utcnow
from .store import Store

EMAIL_PREVIEW_CHARS = 200


def build_scan_record(result: dict, user_id: str) -> dict:
    record = {"url": result["url"], "virusTotal": result.get("virusTotal")}
    if "urlscan" in result:
        record["urlscan"] = result["urlscan"]
    record["timestamp"] = isoformat(utcnow())
    record["userId"] = user_id
    return record


def preview_email(text: str, limit: int = EMAIL_PREVIEW_CHARS) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def build_email_record(
    text: str,
    extracted: List[str],
    analyses: List[dict],
    user_id: str,
    preview_chars: int = EMAIL_PREVIEW_CHARS,
) -> dict:
    return {
        "emailText": preview_email(text, preview_chars),
        "extractedUrls": list(extracted),
        "analyses": list(analyses),
        "timestamp": isoformat(utcnow()),
        "userId": user_id,
    }


async def record(store: Store, user_id: str, entry: dict) -> dict:
    """Prepend ``entry`` to the user's history; the store drops anything past its limit."""
    await store.record(user_id, entry)
    return entry
