# acaishop/main.py
from fastapi import FastAPI
import uvicorn

from acaishop.api import include_routers
from acaishop.data.database import Base, SessionLocal, engine, persistence_mode
from acaishop.data.seed import seed_defaults
from acaishop.utils.logging import get_logger

# every model must be on Base.metadata before create_all
import acaishop.data.models  # noqa: F401

logger = get_logger(__name__)


def init_database():
    logger.info(f"Initializing database ({persistence_mode}), tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise

    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()
    logger.info("Database ready")


init_database()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Açaí Shop",
        version="1.0.0",
    )
    return include_routers(app)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
