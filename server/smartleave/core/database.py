import asyncio
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from smartleave.core.config import settings
from smartleave.core.exceptions import StorageError

logger = logging.getLogger(__name__)

# Convert postgresql:// to postgresql+asyncpg:// for async operations
database_url = settings.DATABASE_URL
if database_url.startswith("postgresql://"):
    database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

# lock_not_available, serialization_failure, deadlock_detected, query_canceled
RETRYABLE_SQLSTATES = {"55P03", "40001", "40P01", "57014"}


def build_engine_options(url: str) -> dict:
    """Bounded timeouts for every storage call, per driver."""
    if url.startswith("sqlite"):
        return {"connect_args": {"timeout": settings.DB_COMMAND_TIMEOUT_SECONDS}}

    connect_args = {
        "command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS,
        "server_settings": {
            "lock_timeout": f"{settings.DB_COMMAND_TIMEOUT_SECONDS * 1000}ms",
        },
    }
    if "supabase" in url.lower():
        # Supabase requires SSL connections
        import ssl
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_context

    return {
        "connect_args": connect_args,
        "pool_timeout": settings.DB_POOL_TIMEOUT_SECONDS,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    database_url,
    echo=False,
    future=True,
    **build_engine_options(database_url),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def is_retryable_db_error(exc: DBAPIError) -> bool:
    """Connection drops, timeouts and lock contention are worth retrying; constraint violations are not."""
    if exc.connection_invalidated:
        return True
    sqlstate = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    return isinstance(exc, OperationalError)


@asynccontextmanager
async def storage_errors(operation: str):
    """Translate driver failures raised inside the block into StorageError."""
    try:
        yield
    except (asyncio.TimeoutError, TimeoutError) as e:
        logger.warning(f"Storage timeout during {operation}")
        raise StorageError(f"Storage timed out during {operation}", retryable=True) from e
    except DBAPIError as e:
        retryable = is_retryable_db_error(e)
        logger.warning(
            f"Storage error during {operation}: {type(e.orig).__name__ if e.orig else type(e).__name__}",
            extra={"operation": operation, "retryable": retryable},
        )
        raise StorageError(f"Storage failure during {operation}", retryable=retryable) from e
