"""
config.py — Flask configuration classes for the DPR Analyzer.
"""
import os
import secrets


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    """Base configuration shared by all environments."""
    SECRET_KEY = os.environ.get("SECRET_KEY") or secrets.token_hex(32)
    MAX_UPLOAD_MB = int(os.environ.get("MAX_UPLOAD_MB", 10))
    MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024
    # Multipart framing headroom; the validator enforces MAX_UPLOAD_BYTES.
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + 1024 * 1024

    DATABASE_URL = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(__file__), 'data', 'app.db')}"
    )
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    RATE_LIMIT = os.environ.get("RATE_LIMIT", "30 per minute")

    # Remote scoring model (OpenAI-compatible chat completions API)
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY") or None
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-3.5-turbo")
    OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_TIMEOUT_SECONDS = int(os.environ.get("OPENAI_TIMEOUT_SECONDS", 30))
    REMOTE_TEXT_LIMIT = int(os.environ.get("REMOTE_TEXT_LIMIT", 8000))

    # Background analysis
    ANALYSIS_EXECUTOR = os.environ.get("ANALYSIS_EXECUTOR", "thread")
    ANALYSIS_WORKERS = int(os.environ.get("ANALYSIS_WORKERS", 4))
    AGENT_REVIEW_ENABLED = _env_flag("AGENT_REVIEW_ENABLED", "true")
    SCORING_SEED = os.environ.get("SCORING_SEED")

    VERSION = "1.0.0"


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    TESTING = False
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        f"sqlite:///{os.path.join(os.path.dirname(__file__), 'data', 'dev.db')}"
    )


class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False


class TestingConfig(BaseConfig):
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    RATELIMIT_ENABLED = False
    OPENAI_API_KEY = None
    ANALYSIS_EXECUTOR = "inline"
    SCORING_SEED = "1234"


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
