"""
Pydantic схемы для настроек платформы
"""
from pydantic import BaseModel, Field
from typing import Optional, Union


class ManagerContact(BaseModel):
    title: Optional[str] = None
    whatsapp: Optional[str] = None
    telegram: Optional[str] = None


class SettingsResponse(BaseModel):
    """Текущие настройки"""
    app_name: str
    usd_to_points: int
    min_deposit_usd: float
    min_withdraw_usd: float
    manager_title: Optional[str] = None
    manager_whatsapp: Optional[str] = None
    manager_telegram: Optional[str] = None

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    """Изменение курса и минимумов"""
    usd_to_points: Union[float, str] = Field(..., description="Баллов за 1$ (округляется вниз)")
    min_deposit_usd: Union[float, str]
    min_withdraw_usd: Union[float, str]
    whatsapp: Optional[str] = None
    telegram: Optional[str] = None
