"""
Скрипт для создания администратора и выдачи JWT токена
Запуск: python scripts/create_admin.py [email]
"""
import asyncio
import sys
from pathlib import Path

# Добавляем путь к модулям
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from rewards.config import settings
from rewards.database import AsyncSessionLocal, engine, init_models
from rewards.services.settings_service import SettingsService
from rewards.services.user_service import UserService
from rewards.utils.auth import create_access_token


async def create_admin(email: str = None):
    """Создать таблицы (development), настройки и администратора"""
    if settings.ENVIRONMENT == "development":
        await init_models()

    async with AsyncSessionLocal() as db:
        platform = await SettingsService.ensure_settings(db)
        admin = await UserService.ensure_admin(db, email=email)

        token = create_access_token({"sub": str(admin.id)})

        print(f"✅ Администратор: {admin.email} ({admin.id})")
        print(f"💱 Курс: 1$ = {platform.usd_to_points} баллов")
        print(f"\n🔑 Bearer токен:\n{token}")

    await engine.dispose()


if __name__ == "__main__":
    print("🚀 Создание администратора...\n")
    asyncio.run(create_admin(sys.argv[1] if len(sys.argv) > 1 else None))
    print("\n✅ Готово!")
