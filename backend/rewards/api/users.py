"""
API endpoint текущего пользователя
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rewards.database import get_db
from rewards.models.user import User
from rewards.schemas.user import MeResponse, UserResponse, TasksSummary
from rewards.schemas.settings import SettingsResponse
from rewards.services.progression_service import TaskProgressionService
from rewards.services.settings_service import SettingsService
from rewards.api.deps import get_progression_service
from rewards.utils.permissions import get_current_user

router = APIRouter(tags=["users"])


@router.get("/me", response_model=MeResponse)
async def get_me(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    progression: TaskProgressionService = Depends(get_progression_service)
):
    """Профиль, настройки платформы и прогресс по задачам"""
    if not current_user.is_admin:
        # Синхронизация прогресса перед подсчётом
        await progression.list_progress(db, current_user.id)

    platform = await SettingsService.get_settings(db)
    summary = await progression.summary(db, current_user.id)
    await db.refresh(current_user)

    return MeResponse(
        app_name=platform.app_name,
        user=UserResponse.model_validate(current_user),
        settings=SettingsResponse.model_validate(platform),
        tasks=TasksSummary(**summary)
    )
