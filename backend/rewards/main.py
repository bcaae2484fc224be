"""
FastAPI приложение
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from rewards.config import settings
from rewards.api import admin, tasks, users, wallet

# Настройка логирования
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="API платформы задач и баллов",
    version="0.1.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключение роутеров
app.include_router(users.router, prefix=settings.API_V1_PREFIX)
app.include_router(tasks.router, prefix=settings.API_V1_PREFIX)
app.include_router(wallet.router, prefix=settings.API_V1_PREFIX)
app.include_router(admin.router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    """Корневой endpoint"""
    return {
        "message": f"{settings.APP_NAME} API",
        "version": "0.1.0",
        "docs": "/docs",
        "api_prefix": settings.API_V1_PREFIX
    }


@app.get("/health")
async def health():
    """Health check"""
    return {"status": "ok"}


@app.on_event("startup")
async def startup_event():
    """Выполняется при запуске приложения"""
    logger.info(f"{settings.APP_NAME} API starting up...")
    logger.info(f"🌐 CORS allowed origins: {settings.CORS_ORIGINS}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    from rewards.database import AsyncSessionLocal, init_models
    from rewards.services.settings_service import SettingsService
    from rewards.services.user_service import UserService

    if settings.ENVIRONMENT == "development":
        # В production схему создаёт alembic
        await init_models()
        logger.info("✅ Таблицы созданы (development)")

    async with AsyncSessionLocal() as db:
        await SettingsService.ensure_settings(db)
        admin = await UserService.ensure_admin(db)
        logger.info(f"ℹ️ Администратор: {admin.email}")


@app.on_event("shutdown")
async def shutdown_event():
    """Выполняется при остановке приложения"""
    logger.info(f"{settings.APP_NAME} API shutting down...")
