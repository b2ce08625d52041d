"""tests/test_api.py — API integration tests"""
import io

from analyzer.results import SECTION_NAMES


def _upload(client, body: bytes, filename="dpr.txt", mimetype="text/plain", **form):
    data = {"dprFile": (io.BytesIO(body), filename, mimetype)}
    data.update(form)
    return client.post("/api/analyze", data=data, content_type="multipart/form-data")


def _analysis_id(client, body: bytes, **kwargs) -> str:
    resp = _upload(client, body, **kwargs)
    assert resp.status_code == 200
    return resp.get_json()["analysisId"]


# ── Health ────────────────────────────────────────────────────────────────────

def test_health_endpoint(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "ok"
    assert "version" in data


# ── Analyze ───────────────────────────────────────────────────────────────────

def test_analyze_returns_processing(client, rich_dpr_text):
    resp = _upload(client, rich_dpr_text.encode())
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "processing"
    assert body["analysisId"]
    assert "message" in body


def test_analyze_no_file(client):
    resp = client.post("/api/analyze", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "No file uploaded"}


def test_analyze_unsupported_type(client):
    resp = _upload(client, b"PK\x03\x04", filename="x.docx", mimetype="application/msword")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Only PDF and TXT files are supported"


def test_analyze_too_large(client):
    resp = _upload(client, b"a" * 11_000_000)
    assert resp.status_code == 400
    assert "10MB" in resp.get_json()["message"]


def test_analyze_language_stored(client):
    analysis_id = _analysis_id(client, b"safety plan", language="hi")
    assert client.get(f"/api/analysis/{analysis_id}").get_json()["language"] == "hi"


# ── Analysis lifecycle ───────────────────────────────────────────────────────

def test_no_keyword_document_scores_high_risk(client, no_keyword_text):
    analysis_id = _analysis_id(client, no_keyword_text.encode())
    body = client.get(f"/api/analysis/{analysis_id}").get_json()

    assert body["status"] == "completed"
    assert body["analyzedAt"] is not None
    assert body["overallScore"] < 30
    assert body["riskLevel"] == "high"
    missing = " ".join(body["analysisData"]["missingElements"])
    for name in SECTION_NAMES:
        assert name in missing


def test_budget_document_scores_budget_section(client, budget_only_text):
    analysis_id = _analysis_id(client, budget_only_text.encode())
    body = client.get(f"/api/analysis/{analysis_id}").get_json()
    sections = body["analysisData"]["sections"]

    assert 90 <= sections["budgetDetails"] < 100
    assert all(sections[n] < 30 for n in SECTION_NAMES if n != "budgetDetails")
    mean = sum(sections.values()) / len(sections)
    assert abs(body["completenessScore"] - mean) <= 0.5


def test_genuine_pdf_records_failure(client, blank_pdf_bytes):
    analysis_id = _analysis_id(client, blank_pdf_bytes, filename="scan.pdf",
                               mimetype="application/pdf")
    body = client.get(f"/api/analysis/{analysis_id}").get_json()
    assert body["status"] == "failed"
    assert body["analysisData"]["sections"] == {name: 0 for name in SECTION_NAMES}
    assert body["analysisData"]["detailedFindings"][0].startswith("Analysis failed")


def test_text_pdf_completes(client, text_pdf_bytes):
    analysis_id = _analysis_id(client, text_pdf_bytes, filename="dpr.pdf",
                               mimetype="application/pdf")
    body = client.get(f"/api/analysis/{analysis_id}").get_json()
    assert body["status"] == "completed"
    assert "Project budget and safety plan" in body["extractedText"]


def test_get_analysis_not_found(client):
    resp = client.get("/api/analysis/DEADBEEF")
    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Analysis not found"}


# ── Delete / recent ──────────────────────────────────────────────────────────

def test_delete_missing_analysis(client):
    resp = client.delete("/api/analysis/does-not-exist")
    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Analysis not found"}


def test_recent_after_deletes(client):
    ids = [_analysis_id(client, f"report {i}".encode(), filename=f"r{i}.txt") for i in range(5)]
    for analysis_id in (ids[1], ids[3]):
        resp = client.delete(f"/api/analysis/{analysis_id}")
        assert resp.status_code == 200
        assert "message" in resp.get_json()

    resp = client.get("/api/recent?limit=3")
    assert resp.status_code == 200
    assert [a["id"] for a in resp.get_json()] == [ids[4], ids[2], ids[0]]


def test_recent_default_and_bad_limit(client):
    for i in range(12):
        _analysis_id(client, b"text", filename=f"r{i}.txt")
    assert len(client.get("/api/recent").get_json()) == 10
    assert len(client.get("/api/recent?limit=abc").get_json()) == 10
    assert len(client.get("/api/recent?limit=0").get_json()) == 10


# ── Stats ─────────────────────────────────────────────────────────────────────

def test_stats_empty(client):
    assert client.get("/api/stats").get_json() == {
        "totalAnalyzed": 0, "compliant": 0, "highRisk": 0, "avgScore": 0,
    }


def test_stats_counts(client, store):
    for overall, compliance, risk in ((90, 85, "low"), (40, 20, "high"), (56, 80, "medium")):
        created = store.create({"filename": "a.txt", "fileType": "text/plain", "fileSize": 1})
        store.update(created["id"], {"status": "completed", "overallScore": overall,
                                     "complianceScore": compliance, "riskLevel": risk})
    store.create({"filename": "pending.txt", "fileType": "text/plain", "fileSize": 1})

    stats = client.get("/api/stats").get_json()
    assert stats["totalAnalyzed"] == 4
    assert stats["compliant"] == 2
    assert stats["highRisk"] == 1
    assert stats["avgScore"] == 46.5


def test_stats_average_rounds_half_up(client, store):
    for overall in (92, 93, 93, 7):
        created = store.create({"filename": "a.txt", "fileType": "text/plain", "fileSize": 1})
        store.update(created["id"], {"status": "completed", "overallScore": overall})

    assert client.get("/api/stats").get_json()["avgScore"] == 71.3
