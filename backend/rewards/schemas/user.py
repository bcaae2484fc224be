"""
Pydantic схемы для пользователей
"""
from pydantic import BaseModel, Field
from typing import Optional, Union
from datetime import datetime
from uuid import UUID

from rewards.models.user import UserStatus
from rewards.schemas.settings import SettingsResponse


class UserBase(BaseModel):
    """Базовая схема пользователя"""
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class UserCreate(UserBase):
    """Схема для создания пользователя администратором"""
    pass


class UserResponse(UserBase):
    """Схема ответа с пользователем"""
    id: UUID
    points_balance: int
    is_admin: bool
    status: UserStatus
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SetPointsRequest(BaseModel):
    """Прямая установка баланса"""
    points: Union[float, str] = Field(..., description="Новый баланс (округляется вниз)")


class TasksSummary(BaseModel):
    total: int
    done: int


class MeResponse(BaseModel):
    """Ответ /me: пользователь, настройки и сводка по задачам"""
    app_name: str
    user: UserResponse
    settings: SettingsResponse
    tasks: TasksSummary

