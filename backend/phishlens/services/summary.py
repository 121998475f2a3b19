# backend/phishlens/services/summary.py
# Turns stored VirusTotal payloads into display text and a risk level.
from typing import Any, Dict, List, Optional, Tuple

COUNT_KEYS = ("malicious", "suspicious", "harmless", "undetected")

# Where the stats container may live, tried in this order.
# Analyses put it under attributes.stats, some older payloads nest it under
# attributes.results.stats, URL objects flatten the counts into attributes.
STATS_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("attributes", "stats"),
    ("attributes", "results", "stats"),
    ("attributes",),
)


def _lookup(payload: Any, path: Tuple[str, ...]) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _stats_container(payload: Any) -> dict:
    for path in STATS_PATHS:
        node = _lookup(payload, path)
        if isinstance(node, dict):
            return node
    return {}


def extract_counts(payload: Optional[dict]) -> Dict[str, int]:
    # each count: stats container first, then attributes.<count>, else 0
    stats = _stats_container(payload)
    counts = {}
    for key in COUNT_KEYS:
        value = stats.get(key)
        if value is None:
            value = _lookup(payload, ("attributes", key))
        try:
            counts[key] = int(value) if value is not None else 0
        except (TypeError, ValueError):
            counts[key] = 0
    return counts


def classify_risk(counts: Dict[str, int]) -> str:
    if counts.get("malicious", 0) > 0:
        return "high"
    if counts.get("suspicious", 0) > 0:
        return "medium"
    return "low"


def format_virustotal_summary(payload: Optional[dict]) -> str:
    if payload is None:
        return "VirusTotal: no data"
    c = extract_counts(payload)
    return (
        f"VirusTotal — malicious: {c['malicious']}, suspicious: {c['suspicious']}, "
        f"harmless: {c['harmless']}, undetected: {c['undetected']}"
    )


def render_email_result(record: dict) -> str:
    extracted = record.get("extractedUrls") or []
    parts = [f"Extracted URLs ({len(extracted)}):"]
    if not extracted:
        parts.append("- none")
    else:
        parts.extend(f"- {u}" for u in extracted)
    for a in record.get("analyses") or []:
        if "error" in a:
            parts.append(f"\nURL: {a.get('url')}\nError: {a['error']}")
        else:
            parts.append(f"\nURL: {a.get('url')}\n{format_virustotal_summary(a.get('virusTotal'))}")
    return "\n".join(parts)


_RISK_ORDER = {"low": 0, "medium": 1, "high": 2}


def summarize_entry(entry: dict) -> dict:
    if entry.get("url"):
        return {
            "type": "URL Scan",
            "timestamp": entry.get("timestamp", ""),
            "content": entry["url"],
            "summary": format_virustotal_summary(entry.get("virusTotal")),
            "risk": classify_risk(extract_counts(entry.get("virusTotal"))),
        }

    if entry.get("emailText"):
        risks = [
            classify_risk(extract_counts(a.get("virusTotal")))
            for a in entry.get("analyses") or []
            if "error" not in a
        ]
        return {
            "type": "Email Analysis",
            "timestamp": entry.get("timestamp", ""),
            "content": entry["emailText"][:50] + "...",
            "summary": render_email_result(entry),
            "risk": max(risks, key=_RISK_ORDER.get, default="low"),
        }

    return {
        "type": "Unknown",
        "timestamp": entry.get("timestamp", ""),
        "content": "",
        "summary": "",
        "risk": "low",
    }


def summarize_history(scans: List[dict]) -> List[dict]:
    return [summarize_entry(s) for s in scans]
