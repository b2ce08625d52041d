"""
tests/conftest.py — pytest fixtures for the DPR Analyzer
"""
import random

import pytest

from app import create_app
from extensions import db


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float = 0.5):
        super().__init__()
        self.value = value

    def random(self):
        return self.value


@pytest.fixture()
def app():
    """A fresh testing app (in-memory DB, inline background tasks) per test."""
    application = create_app("testing")
    application.extensions["dpr_orchestrator"].engine.rng = FixedRandom(0.5)
    with application.app_context():
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    """Test client for API integration tests."""
    return app.test_client()


@pytest.fixture()
def store(app):
    return app.extensions["dpr_store"]


@pytest.fixture()
def orchestrator(app):
    return app.extensions["dpr_orchestrator"]


@pytest.fixture()
def fixed_rng():
    return FixedRandom(0.5)


@pytest.fixture()
def make_rng():
    return FixedRandom


# ── Sample documents ─────────────────────────────────────────────────────────

def _make_pdf(extra_bytes: bytes = b"") -> bytes:
    """A minimal PDF 1.4 document with one blank page and no text."""
    content = b"""%PDF-1.4
1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj
2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj
3 0 obj<</Type/Page/MediaBox[0 0 612 792]/Parent 2 0 R/Resources<<>>>>endobj
xref
0 4
0000000000 65535 f\r
0000000009 00000 n\r
0000000058 00000 n\r
0000000115 00000 n\r
trailer<</Size 4/Root 1 0 R>>
startxref
200
%%EOF
"""
    return content + extra_bytes


def _make_text_pdf(text: str) -> bytes:
    """A one-page PDF whose content stream draws ``text`` in Helvetica."""
    stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<</Type/Catalog/Pages 2 0 R>>",
        b"<</Type/Pages/Kids[3 0 R]/Count 1>>",
        b"<</Type/Page/Parent 2 0 R/MediaBox[0 0 612 792]"
        b"/Resources<</Font<</F1 4 0 R>>>>/Contents 5 0 R>>",
        b"<</Type/Font/Subtype/Type1/BaseFont/Helvetica>>",
        b"<</Length %d>>\nstream\n" % len(stream) + stream + b"\nendstream",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<</Size %d/Root 1 0 R>>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1, xref_at)
    return bytes(out)


@pytest.fixture(scope="session")
def blank_pdf_bytes():
    return _make_pdf()


@pytest.fixture(scope="session")
def text_pdf_bytes():
    return _make_text_pdf("Project budget and safety plan")


@pytest.fixture()
def no_keyword_text():
    """Exactly 50 characters, none of them section keywords."""
    return "The quick brown fox jumps over the lazy dog twice."


@pytest.fixture()
def budget_only_text():
    return "budget cost financial " * 50


@pytest.fixture()
def rich_dpr_text():
    return """
Executive Summary and Introduction
Objective: build a 12 km rural road. Scope covers design, construction and maintenance.
Methodology: the technical specification follows IRC standard design and system architecture.
Budget: total project cost Rs. 45,00,000 with financial allocation and funding per phase.
Timeline: the schedule spans 18 months with milestone reviews each phase and a firm deadline.
Environmental impact assessment covers pollution control, green cover and sustainability.
Safety plan: hazard identification, risk mitigation, contingency plans and worker protection.
Legal compliance: forest clearance, environmental approval, permit authorization, regulation and policy.
Conclusion: flood and monsoon delay risk is addressed with a contingency budget.
"""
