from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

_engine_kwargs = {"pool_pre_ping": True, "echo": settings.DEBUG}
if settings.database_url.startswith("postgresql"):
    _engine_kwargs.update(pool_size=10, max_overflow=20)

sync_engine = create_engine(settings.database_url, **_engine_kwargs)

# Reports fetch orders and expenses in the same snapshot
if sync_engine.dialect.name == "postgresql":
    report_engine = sync_engine.execution_options(
        isolation_level=settings.REPORTS_ISOLATION_LEVEL
    )
else:
    report_engine = sync_engine

ReportSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=report_engine)

Base = declarative_base()


def get_report_db():
    """Sesión de solo lectura para reportes; el snapshot dura toda la petición."""
    db = ReportSessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        db.rollback()
        raise
    finally:
        db.close()
