import pytest

from conftest import FakeReputation, register, vt_payload

PROTECTED = [
    ("get", "/api/user/scans", None),
    ("get", "/api/user/scans/summary", None),
    ("post", "/api/analyze/url", {"url": "http://example.com"}),
    ("post", "/api/analyze/email", {"emailText": "go to http://example.com"}),
]


@pytest.mark.parametrize("method,path,body", PROTECTED)
def test_protected_routes_require_a_session(client, reputation, method, path, body):
    kwargs = {"json": body} if body is not None else {}
    r = getattr(client, method)(path, **kwargs)
    assert r.status_code == 401
    assert r.json() == {"error": "Authentication required"}
    assert reputation.calls == []


def test_logged_out_session_cannot_scan(authed_client, reputation):
    authed_client.post("/api/auth/logout")
    r = authed_client.post("/api/analyze/url", json={"url": "http://example.com"})
    assert r.status_code == 401
    assert reputation.calls == []


def test_end_to_end_url_scan(client, reputation):
    register(client)
    client.post("/api/auth/logout")
    client.post("/api/auth/login", json={"email": "alice@example.com", "password": "hunter22"})

    r = client.post("/api/analyze/url", json={"url": "http://example.com"})
    assert r.status_code == 200
    record = r.json()
    assert record["url"] == "http://example.com"
    assert record["virusTotal"] == vt_payload()
    assert record["timestamp"].endswith("Z")
    assert record["userId"] == client.get("/api/auth/me").json()["user"]["id"]
    assert "urlscan" not in record

    scans = client.get("/api/user/scans").json()["scans"]
    assert len(scans) == 1
    assert scans[0]["url"] == "http://example.com"
    assert reputation.calls == ["http://example.com"]


@pytest.mark.parametrize("body", [{}, {"url": ""}])
def test_url_scan_requires_url(authed_client, reputation, body):
    r = authed_client.post("/api/analyze/url", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing url string"}
    assert reputation.calls == []


def test_url_scan_with_wrongly_typed_url_is_a_400(authed_client, reputation):
    r = authed_client.post("/api/analyze/url", json={"url": ["http://example.com"]})
    assert r.status_code == 400
    assert reputation.calls == []


def test_url_scan_without_analysis_id_has_null_payload(make_client):
    client = make_client(reputation=FakeReputation(results={"http://slow.test": None}))
    register(client)
    r = client.post("/api/analyze/url", json={"url": "http://slow.test"})
    assert r.status_code == 200
    assert r.json()["virusTotal"] is None


def test_url_scan_provider_failure_is_a_500_and_not_recorded(make_client):
    client = make_client(reputation=FakeReputation(fail={"http://bad.test"}))
    register(client)

    r = client.post("/api/analyze/url", json={"url": "http://bad.test"})
    assert r.status_code == 500
    body = r.json()
    assert body["error"] == "VirusTotal analysis failed"
    assert body["details"]["error"]["code"] == "QuotaExceededError"
    assert client.get("/api/user/scans").json()["scans"] == []


def test_url_scan_includes_urlscan_when_configured(make_client):
    urlscan = FakeReputation(default={"pending": True, "uuid": "abc"})
    client = make_client(urlscan=urlscan)
    register(client)

    record = client.post("/api/analyze/url", json={"url": "http://example.com"}).json()
    assert record["urlscan"] == {"pending": True, "uuid": "abc"}
    assert urlscan.calls == ["http://example.com"]


def test_email_analysis_is_sequential_and_survives_failures(make_client):
    reputation = FakeReputation(fail={"http://b.test"})
    client = make_client(reputation=reputation)
    register(client)

    text = "Hi, see http://a.test and http://b.test then www.c.test and http://a.test again"
    r = client.post("/api/analyze/email", json={"emailText": text})
    assert r.status_code == 200
    record = r.json()

    assert record["extractedUrls"] == ["http://a.test", "http://b.test", "www.c.test"]
    assert reputation.calls == ["http://a.test", "http://b.test", "http://www.c.test"]

    analyses = record["analyses"]
    assert [a["url"] for a in analyses] == ["http://a.test", "http://b.test", "http://www.c.test"]
    assert analyses[0]["virusTotal"] == vt_payload()
    assert "error" in analyses[1] and "virusTotal" not in analyses[1]
    assert analyses[2]["virusTotal"] == vt_payload()


def test_email_analysis_failed_candidate_keeps_raw_url(make_client):
    reputation = FakeReputation(fail={"http://www.bad.test"})
    client = make_client(reputation=reputation)
    register(client)

    r = client.post("/api/analyze/email", json={"emailText": "click www.bad.test or http://ok.test"})
    analyses = r.json()["analyses"]
    assert analyses[0] == {
        "url": "www.bad.test",
        "error": {"error": {"code": "QuotaExceededError", "url": "http://www.bad.test"}},
    }
    assert analyses[1]["url"] == "http://ok.test"
    assert reputation.calls == ["http://www.bad.test", "http://ok.test"]


def test_email_analysis_caps_candidates(authed_client, reputation):
    text = " ".join(f"http://site{i}.test" for i in range(9))
    record = authed_client.post("/api/analyze/email", json={"emailText": text}).json()
    assert len(record["extractedUrls"]) == 5
    assert len(reputation.calls) == 5


def test_email_text_preview_is_truncated(authed_client):
    text = "A" * 250
    record = authed_client.post("/api/analyze/email", json={"emailText": text}).json()
    assert record["emailText"] == "A" * 200 + "..."
    assert record["extractedUrls"] == []
    assert record["analyses"] == []

    short = authed_client.post("/api/analyze/email", json={"emailText": "short note"}).json()
    assert short["emailText"] == "short note"


def test_email_analysis_requires_text(authed_client):
    r = authed_client.post("/api/analyze/email", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Missing emailText string"}


def test_history_keeps_fifty_newest_first(authed_client):
    for i in range(60):
        r = authed_client.post("/api/analyze/url", json={"url": f"http://site{i}.test"})
        assert r.status_code == 200

    scans = authed_client.get("/api/user/scans").json()["scans"]
    assert len(scans) == 50
    assert [s["url"] for s in scans] == [f"http://site{i}.test" for i in range(59, 9, -1)]


def test_history_is_per_user(client):
    register(client, email="a@x.test")
    client.post("/api/analyze/url", json={"url": "http://one.test"})
    client.post("/api/auth/logout")

    register(client, email="b@x.test")
    assert client.get("/api/user/scans").json()["scans"] == []


def test_history_mixes_url_and_email_records(authed_client):
    authed_client.post("/api/analyze/url", json={"url": "http://example.com"})
    authed_client.post("/api/analyze/email", json={"emailText": "see www.example.org"})

    scans = authed_client.get("/api/user/scans").json()["scans"]
    assert "emailText" in scans[0]
    assert scans[1]["url"] == "http://example.com"


def test_history_summary(make_client):
    reputation = FakeReputation(results={"http://evil.test": vt_payload(malicious=4)})
    client = make_client(reputation=reputation)
    register(client)
    client.post("/api/analyze/url", json={"url": "http://evil.test"})

    items = client.get("/api/user/scans/summary").json()["items"]
    assert items == [{
        "type": "URL Scan",
        "timestamp": items[0]["timestamp"],
        "content": "http://evil.test",
        "summary": "VirusTotal — malicious: 4, suspicious: 0, harmless: 60, undetected: 10",
        "risk": "high",
    }]
