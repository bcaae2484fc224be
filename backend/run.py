"""
Запуск API сервера
"""
import logging
import os

import uvicorn

from rewards.config import settings

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")
    is_dev = settings.ENVIRONMENT == "development"

    logger.info(f"🚀 {settings.APP_NAME} API на {host}:{port} ({settings.ENVIRONMENT})")
    if is_dev:
        logger.info(f"📝 Документация: http://{host}:{port}/docs")

    uvicorn.run(
        "rewards.main:app",
        host=host,
        port=port,
        reload=is_dev,
        log_level=settings.LOG_LEVEL.lower()
    )
