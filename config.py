# config.py
import os

def _to_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}

def _to_int(val: str | None, default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


def _engine_options(uri: str) -> dict:
    # SQLite uses a static/singleton pool; pool sizing only applies to server DBs
    if uri.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 180,
        "pool_size": _to_int(os.environ.get("DB_POOL_SIZE"), 5),
        "max_overflow": _to_int(os.environ.get("DB_MAX_OVERFLOW"), 10),
        "pool_timeout": _to_int(os.environ.get("DB_POOL_TIMEOUT"), 30),
    }


class Config:
    # ── Core ─────────────────────────────────────────────────────────────────
    DEBUG = _to_bool(os.environ.get("DEBUG") or os.environ.get("FLASK_DEBUG"), False)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev_secret")  # ← override in prod!
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///transport.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)

    # create tables on boot when no migrations have been run (dev convenience)
    AUTO_CREATE_TABLES = _to_bool(os.environ.get("AUTO_CREATE_TABLES"), True)

    # ── HTTP / realtime ─────────────────────────────────────────────────────
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    REALTIME_ENABLED = _to_bool(os.environ.get("REALTIME_ENABLED"), True)

    # ── Assignment rules ────────────────────────────────────────────────────
    # Off: any collector may take any bin (dispatch UI filters by city/status).
    # On: reject cross-city assignments and offline collectors with 409.
    ENFORCE_ASSIGNMENT_COMPATIBILITY = _to_bool(
        os.environ.get("ENFORCE_ASSIGNMENT_COMPATIBILITY"), False
    )


class ProductionConfig(Config):
    DEBUG = False
    SECRET_KEY = os.environ.get("SECRET_KEY")
    AUTO_CREATE_TABLES = _to_bool(os.environ.get("AUTO_CREATE_TABLES"), False)


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG").upper()


class TestingConfig(Config):
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)
    AUTO_CREATE_TABLES = False
    ENFORCE_ASSIGNMENT_COMPATIBILITY = False


CONFIGS = {
    "production": ProductionConfig,
    "development": DevelopmentConfig,
    "testing": TestingConfig,
}


def config_for(env=None):
    """Config class for APP_ENV (unknown or unset falls back to the base Config)."""
    name = (env if env is not None else os.environ.get("APP_ENV", "")).strip().lower()
    return CONFIGS.get(name, Config)
