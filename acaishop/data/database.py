# acaishop/data/database.py
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from acaishop.utils import settings
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

PERSISTENCE_MODES = ("database", "local", "auto")


def _local_url() -> str:
    path = Path(settings.LOCAL_DATABASE_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def _engine_for(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, future=True, connect_args={"check_same_thread": False})
    return create_engine(url, future=True, pool_pre_ping=True)


def _database_reachable(engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Hosted database unavailable: {e}")
        return False


def resolve_persistence(mode: str | None = None):
    """
    Pick the engine for the configured persistence mode.

    database -> DATABASE_URL
    local    -> sqlite file under LOCAL_DATABASE_PATH (offline/demo)
    auto     -> DATABASE_URL if it answers, otherwise local
    Returns (resolved_mode, engine).
    """
    mode = (mode or settings.PERSISTENCE_MODE).lower()
    if mode not in PERSISTENCE_MODES:
        raise ValueError(f"Unknown persistence mode: {mode}")

    if mode == "local":
        return "local", _engine_for(_local_url())

    hosted = _engine_for(settings.DATABASE_URL)
    if mode == "database":
        return "database", hosted

    if _database_reachable(hosted):
        return "database", hosted

    logger.warning("Falling back to local persistence")
    hosted.dispose()
    return "local", _engine_for(_local_url())


persistence_mode, engine = resolve_persistence()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)

logger.info(f"Persistence mode: {persistence_mode} ({engine.url.render_as_string(hide_password=True)})")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
