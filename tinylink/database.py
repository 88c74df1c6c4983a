from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from .config import settings

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}

def async_database_url(raw_url: str) -> str:
    """Point bare postgres URLs (as handed out by most hosts) at the asyncpg driver."""
    for prefix in ("postgres://", "postgresql://"):
        if raw_url.startswith(prefix):
            return "postgresql+asyncpg://" + raw_url[len(prefix):]
    return raw_url

def connect_args_for(url: str) -> dict:
    parsed = make_url(url)
    if parsed.get_backend_name() != "postgresql":
        return {}
    # Managed databases require TLS; a local server usually has it off
    if parsed.host and parsed.host not in LOCAL_HOSTS:
        return {"ssl": "require"}
    return {}

DATABASE_URL = async_database_url(settings.DATABASE_URL)

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    connect_args=connect_args_for(DATABASE_URL),
)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

class Base(DeclarativeBase):
    pass

async def init_models():
    from . import models  # noqa: F401  registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
