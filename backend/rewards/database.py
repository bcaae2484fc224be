"""
Подключение к базе данных
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from rewards.config import settings
import logging

logger = logging.getLogger(__name__)


def normalize_database_url(db_url: str) -> str:
    """Преобразовать URL для async драйверов (aiosqlite / asyncpg)"""
    if not db_url or db_url.strip() == "":
        raise ValueError("DATABASE_URL не установлен! Проверьте переменные окружения.")

    if db_url.startswith("sqlite://"):
        # SQLite для разработки и тестов
        return db_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    if db_url.startswith("postgresql://"):
        return db_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if db_url.startswith("sqlite+aiosqlite://") or db_url.startswith("postgresql+asyncpg://"):
        return db_url

    logger.warning(f"Неизвестный формат DATABASE_URL: {db_url[:30]}...")
    return db_url


db_url = normalize_database_url(settings.DATABASE_URL)

try:
    engine = create_async_engine(
        db_url,
        echo=False,
        future=True
    )
    logger.info(f"Database engine создан успешно (URL: {db_url.split('@')[0]}@***)")
except Exception as e:
    logger.error(f"Ошибка создания database engine: {e}")
    raise

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base для моделей
Base = declarative_base()


async def get_db():
    """Dependency для получения сессии БД"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_models(bind=None):
    """Создать таблицы (development и тесты; в production - alembic)"""
    # Импорт регистрирует все модели в Base.metadata
    import rewards.models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
