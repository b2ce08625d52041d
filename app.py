"""
app.py — Flask Application Factory for the DPR Analyzer.
"""
import os
import logging

from flask import Flask
from flask_cors import CORS
from pythonjsonlogger import jsonlogger

from analyzer import ScoringEngine
from analyzer.orchestrator import AnalysisOrchestrator
from analyzer.tasks import TaskRunner, make_executor
from config import config_map
from extensions import db, limiter
from models.store import AnalysisStore

# ── Logging ────────────────────────────────────────────────────────────────────
handler = logging.StreamHandler()
handler.setFormatter(jsonlogger.JsonFormatter(
    "%(asctime)s %(levelname)s %(name)s %(message)s"
))
logging.basicConfig(level=logging.INFO, handlers=[handler])

logger = logging.getLogger(__name__)


def create_app(env: str = None) -> Flask:
    """Application factory."""
    env = env or os.environ.get("FLASK_ENV", "development")
    cfg = config_map.get(env, config_map["default"])

    app = Flask(__name__)
    app.config.from_object(cfg)

    # ── Ensure data directory exists for the default SQLite database ──────────
    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") \
            and ":memory:" not in app.config["SQLALCHEMY_DATABASE_URI"]:
        data_dir = os.path.join(os.path.dirname(__file__), "data")
        os.makedirs(data_dir, exist_ok=True)

    # ── Extensions ────────────────────────────────────────────────────────────
    db.init_app(app)
    CORS(app, origins="same-origin")
    limiter.init_app(app)

    # ── Pipeline wiring ───────────────────────────────────────────────────────
    store = AnalysisStore(db)
    engine = ScoringEngine.from_config(app.config)
    runner = TaskRunner(app, make_executor(app.config["ANALYSIS_EXECUTOR"],
                                           app.config["ANALYSIS_WORKERS"]))
    app.extensions["dpr_store"] = store
    app.extensions["dpr_orchestrator"] = AnalysisOrchestrator(
        store, engine, runner, max_upload_bytes=app.config["MAX_UPLOAD_BYTES"]
    )

    # ── Blueprints ────────────────────────────────────────────────────────────
    from blueprints.api import api_bp
    app.register_blueprint(api_bp, url_prefix="/api")

    # ── DB init ───────────────────────────────────────────────────────────────
    with app.app_context():
        db.create_all()
        logger.info("Database tables created / verified.")

    logger.info("DPR Analyzer app created [env=%s, scoring=%s]",
                env, "remote" if engine.remote else "local")
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
