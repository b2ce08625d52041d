"""
blueprints/api/routes.py — REST API consumed by the dashboard UI.

Routes:
    GET    /api/health
    GET    /api/stats
    POST   /api/analyze
    GET    /api/analysis/<id>
    DELETE /api/analysis/<id>
    GET    /api/recent
"""
import logging

from flask import current_app, request, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename

from analyzer.errors import StoreError, ValidationError
from analyzer.heuristic import round_half_up
from blueprints.api import api_bp
from extensions import limiter

logger = logging.getLogger(__name__)

STATS_WINDOW = 100
DEFAULT_RECENT_LIMIT = 10
COMPLIANT_THRESHOLD = 80


def _store():
    return current_app.extensions["dpr_store"]


def _orchestrator():
    return current_app.extensions["dpr_orchestrator"]


def _message(text: str, status: int):
    return jsonify({"message": text}), status


# ── Error handlers ──────────────────────────────────────────────────────────────

@api_bp.errorhandler(ValidationError)
def handle_validation_error(exc):
    return _message(str(exc), 400)


@api_bp.errorhandler(StoreError)
def handle_store_error(exc):
    return _message("Storage error, please try again later", 500)


@api_bp.errorhandler(HTTPException)
def handle_http_error(exc):
    if exc.code == 413:
        return _message("File size exceeds upload limit", 413)
    return _message(exc.description or exc.name, exc.code)


@api_bp.errorhandler(Exception)
def handle_unexpected_error(exc):
    logger.error("Unhandled API error: %s", exc, exc_info=True)
    return _message("Internal server error", 500)


# ── Routes ──────────────────────────────────────────────────────────────────────

@api_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "version": current_app.config.get("VERSION", "1.0.0")}), 200


@api_bp.route("/stats", methods=["GET"])
def stats():
    """GET /api/stats — dashboard counters over the most recent analyses."""
    recent = _store().list_recent(STATS_WINDOW)
    total = len(recent)
    compliant = sum(1 for a in recent if (a["complianceScore"] or 0) >= COMPLIANT_THRESHOLD)
    high_risk = sum(1 for a in recent if a["riskLevel"] == "high")
    avg_score = sum(a["overallScore"] or 0 for a in recent) / total if total else 0
    return jsonify({
        "totalAnalyzed": total,
        "compliant": compliant,
        "highRisk": high_risk,
        "avgScore": round_half_up(avg_score * 10) / 10,
    }), 200


@api_bp.route("/analyze", methods=["POST"])
@limiter.limit(lambda: current_app.config.get("RATE_LIMIT", "30 per minute"))
def analyze():
    """POST /api/analyze — accept a DPR upload and start background analysis."""
    file = request.files.get("dprFile")
    if file is None or not file.filename:
        return _message("No file uploaded", 400)

    filename = secure_filename(file.filename) or "upload"
    language = request.form.get("language") or "en"
    buffer = file.read()

    analysis = _orchestrator().submit(filename, file.mimetype, buffer, language)
    return jsonify({
        "analysisId": analysis["id"],
        "message": "File uploaded successfully. Analysis in progress.",
        "status": "processing",
    }), 200


@api_bp.route("/analysis/<analysis_id>", methods=["GET"])
def get_analysis(analysis_id: str):
    """GET /api/analysis/<id> — poll an analysis record."""
    analysis = _store().get(analysis_id)
    if analysis is None:
        return _message("Analysis not found", 404)
    return jsonify(analysis), 200


@api_bp.route("/analysis/<analysis_id>", methods=["DELETE"])
def delete_analysis(analysis_id: str):
    """DELETE /api/analysis/<id> — remove an analysis permanently."""
    if not _store().delete(analysis_id):
        return _message("Analysis not found", 404)
    return _message("Analysis deleted successfully", 200)


@api_bp.route("/recent", methods=["GET"])
def recent():
    """GET /api/recent?limit=N — newest analyses first."""
    limit = request.args.get("limit", DEFAULT_RECENT_LIMIT, type=int)
    if not limit or limit < 1:
        limit = DEFAULT_RECENT_LIMIT
    return jsonify(_store().list_recent(limit)), 200
