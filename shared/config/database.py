from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from .settings import DATABASE_URL, SQL_ECHO

# Every service keeps its tables in its own schema to simulate isolation
SCHEMAS = (
    "auth_schema",
    "product_schema",
    "cart_schema",
    "order_schema",
    "pickup_schema",
    "notification_schema",
    "review_schema",
)

IS_SQLITE = DATABASE_URL.startswith("sqlite")

if IS_SQLITE:
    # SQLite has no schemas: collapse them onto the main database.
    # NullPool keeps aiosqlite connections from leaking across event loops.
    engine = create_async_engine(
        DATABASE_URL,
        echo=SQL_ECHO,
        poolclass=NullPool,
        execution_options={"schema_translate_map": {name: None for name in SCHEMAS}},
    )
else:
    engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO, pool_pre_ping=True)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session


async def init_models():
    """Creates the service schemas (PostgreSQL only) and all registered tables."""
    async with engine.begin() as conn:
        if not IS_SQLITE:
            for name in SCHEMAS:
                await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {name}"))
        await conn.run_sync(Base.metadata.create_all)
