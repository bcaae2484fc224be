"""
Сервис настроек платформы
"""
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Optional
import logging

from rewards.config import settings
from rewards.models.platform_settings import PlatformSettings, SETTINGS_ROW_ID
from rewards.services.errors import ValidationError
from rewards.utils.numbers import MAX_POINTS, parse_decimal, floor_int

logger = logging.getLogger(__name__)


class SettingsService:
    """Курс, минимумы и контакты менеджера"""

    @staticmethod
    async def get_settings(db: AsyncSession) -> PlatformSettings:
        """Получить строку настроек, создав её из значений по умолчанию при первом обращении"""
        row = await db.get(PlatformSettings, SETTINGS_ROW_ID, populate_existing=True)
        if row is None:
            row = PlatformSettings(
                id=SETTINGS_ROW_ID,
                app_name=settings.APP_NAME,
                usd_to_points=settings.DEFAULT_USD_TO_POINTS,
                min_deposit_usd=settings.DEFAULT_MIN_DEPOSIT_USD,
                min_withdraw_usd=settings.DEFAULT_MIN_WITHDRAW_USD,
                manager_title=settings.DEFAULT_MANAGER_TITLE,
                manager_whatsapp=settings.DEFAULT_MANAGER_WHATSAPP,
                manager_telegram=settings.DEFAULT_MANAGER_TELEGRAM,
            )
            db.add(row)
            await db.flush()
            logger.info("Настройки платформы созданы со значениями по умолчанию")
        return row

    @staticmethod
    async def ensure_settings(db: AsyncSession) -> PlatformSettings:
        """Создать строку настроек при старте приложения"""
        row = await SettingsService.get_settings(db)
        await db.commit()
        return row

    @staticmethod
    async def update_settings(
        db: AsyncSession,
        usd_to_points: Any,
        min_deposit_usd: Any,
        min_withdraw_usd: Any,
        manager_whatsapp: Optional[str] = None,
        manager_telegram: Optional[str] = None
    ) -> PlatformSettings:
        """
        Обновить курс и минимумы

        Курс округляется вниз до целого (не меньше 1). Существующие заявки
        не пересчитываются: у каждой сохранён свой курс.
        """
        rate = parse_decimal(usd_to_points)
        if rate is None or rate <= 0 or rate > MAX_POINTS:
            raise ValidationError("usd_to_points is invalid")
        min_deposit = parse_decimal(min_deposit_usd)
        if min_deposit is None or min_deposit <= 0 or min_deposit > MAX_POINTS:
            raise ValidationError("min_deposit_usd is invalid")
        min_withdraw = parse_decimal(min_withdraw_usd)
        if min_withdraw is None or min_withdraw <= 0 or min_withdraw > MAX_POINTS:
            raise ValidationError("min_withdraw_usd is invalid")

        row = await SettingsService.get_settings(db)
        row.usd_to_points = max(1, floor_int(rate))
        row.min_deposit_usd = float(min_deposit)
        row.min_withdraw_usd = float(min_withdraw)

        if manager_whatsapp:
            row.manager_whatsapp = str(manager_whatsapp).strip()
        if manager_telegram:
            row.manager_telegram = str(manager_telegram).strip()

        await db.commit()
        await db.refresh(row)
        logger.info(
            f"Настройки обновлены: курс {row.usd_to_points}, "
            f"мин. пополнение {row.min_deposit_usd}$, мин. вывод {row.min_withdraw_usd}$"
        )
        return row
