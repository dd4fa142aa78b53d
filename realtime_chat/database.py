"""
Database configuration and connection pooling
"""
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool
from realtime_chat.config import settings
import logging
import time

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Pool options for the configured backend"""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live and die with a single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "poolclass": QueuePool,
        "pool_size": settings.POOL_SIZE,
        "max_overflow": settings.MAX_OVERFLOW,
        "pool_timeout": settings.POOL_TIMEOUT,
        "pool_recycle": settings.POOL_RECYCLE,
        "pool_pre_ping": True,
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Statistics tracking
query_stats = {
    'total_queries': 0,
    'slow_queries': 0,
}


@event.listens_for(engine, "before_cursor_execute")
def receive_before_cursor_execute(conn, cursor, statement, params, context, executemany):
    """Track query start time"""
    conn.info.setdefault('query_start_time', []).append(time.time())


@event.listens_for(engine, "after_cursor_execute")
def receive_after_cursor_execute(conn, cursor, statement, params, context, executemany):
    """Track query completion"""
    total_time = time.time() - conn.info['query_start_time'].pop()
    query_stats['total_queries'] += 1

    if total_time > settings.SLOW_QUERY_SECONDS:
        query_stats['slow_queries'] += 1
        logger.warning(
            f"⚠️  SLOW QUERY ({total_time:.3f}s): {statement[:100]}...",
            extra={'duration_ms': round(total_time * 1000, 2)}
        )


def init_db():
    """Create database tables"""
    from realtime_chat.models import Base
    Base.metadata.create_all(bind=engine)
    logger.info("✅ Database tables ready")


def get_db():
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_pool_status():
    """Get connection pool status"""
    pool = engine.pool

    if not isinstance(pool, QueuePool):
        return {"pool_class": type(pool).__name__}

    return {
        "pool_class": type(pool).__name__,
        "pool_size": pool.size(),
        "checked_in": pool.checkedin(),
        "checked_out": pool.checkedout(),
        "overflow": max(pool.overflow(), 0),
        "max_overflow": settings.MAX_OVERFLOW,
        "total_possible": pool.size() + settings.MAX_OVERFLOW
    }


def get_query_stats():
    """Get query statistics"""
    return query_stats.copy()


def check_database_health():
    """Check database connection"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
