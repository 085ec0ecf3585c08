"""
Database connection and schema module
"""
import logging
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    event,
    text,
)
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

logger = logging.getLogger(__name__)

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(512), nullable=False),
    Column("handle", String(512)),
    Column("vendor", String(255)),
    Column("product_type", String(255)),
    Column("price", Numeric(18, 6)),
    Column("compare_at_price", Numeric(18, 6)),
    Column("sku", String(255)),
    Column("available", Boolean),
    Column("description", Text),
    Column("image_url", String(2048)),
    # JSON-encoded list of variants
    Column("variants", Text),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_unicode_lower(dbapi_connection, connection_record):
    # SQLite's built-in lower() only folds ASCII letters
    dbapi_connection.create_function("lower", 1, _unicode_lower)


def create_engine(database_url: str) -> AsyncEngine:
    """
    Create async engine

    Args:
        database_url: SQLAlchemy async database URL

    Returns:
        Async engine
    """
    options = {"echo": False, "pool_pre_ping": True}
    is_sqlite = make_url(database_url).get_backend_name() == "sqlite"
    # SQLite pools do not take sizing arguments
    if not is_sqlite:
        options.update(pool_size=10, max_overflow=20)

    engine = create_async_engine(database_url, **options)
    if is_sqlite:
        event.listen(engine.sync_engine, "connect", _register_unicode_lower)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create session factory bound to the engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create the products table if it does not exist"""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Database schema ready")


async def check_connection(engine: AsyncEngine) -> bool:
    """Check database connectivity"""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
        return False
