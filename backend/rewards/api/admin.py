"""
API endpoints администратора: заявки, пользователи, настройки, задачи
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
import logging

from rewards.database import get_db
from rewards.models.user import User
from rewards.schemas.settings import SettingsResponse, SettingsUpdate
from rewards.schemas.task import TaskResponse, TaskCreate, TaskUpdate
from rewards.schemas.user import UserResponse, UserCreate, SetPointsRequest
from rewards.schemas.wallet import WalletTransactionResponse, PendingRequestItem, PendingRequestsResponse
from rewards.services.errors import RewardsError
from rewards.services.catalog_service import CatalogService
from rewards.services.settings_service import SettingsService
from rewards.services.user_service import UserService
from rewards.services.wallet_service import WalletService
from rewards.api.deps import get_catalog_service, get_user_service, get_wallet_service
from rewards.utils.permissions import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# ---------- Заявки кошелька ----------

@router.get("/requests", response_model=PendingRequestsResponse)
async def pending_requests(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Ожидающие заявки (до 200), новые первыми"""
    rows = await WalletService.list_pending(db)
    return PendingRequestsResponse(rows=[PendingRequestItem(**row) for row in rows])


@router.post("/requests/{tx_id}/approve", response_model=WalletTransactionResponse)
async def approve_request(
    tx_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    wallet: WalletService = Depends(get_wallet_service)
):
    """Одобрить заявку: баланс пользователя меняется на points_delta"""
    try:
        transaction = await wallet.approve(db, tx_id, admin_id=admin.id)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return WalletTransactionResponse.model_validate(transaction)


@router.post("/requests/{tx_id}/reject", response_model=WalletTransactionResponse)
async def reject_request(
    tx_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    wallet: WalletService = Depends(get_wallet_service)
):
    """Отклонить заявку"""
    try:
        transaction = await wallet.reject(db, tx_id, admin_id=admin.id)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return WalletTransactionResponse.model_validate(transaction)


# ---------- Пользователи ----------

@router.get("/users", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Пользователи (без администраторов), новые первыми"""
    users = await UserService.list_users(db)
    return [UserResponse.model_validate(u) for u in users]


@router.post("/users", response_model=UserResponse)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    users: UserService = Depends(get_user_service)
):
    """Создать пользователя; задачи начинаются с первой"""
    try:
        user = await users.create_user(db, full_name=data.full_name, email=data.email, phone=data.phone)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return UserResponse.model_validate(user)


@router.post("/users/{user_id}/points", response_model=UserResponse)
async def set_user_points(
    user_id: UUID,
    data: SetPointsRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    users: UserService = Depends(get_user_service)
):
    """Установить баланс пользователя"""
    try:
        user = await users.set_points(db, user_id, data.points)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    logger.info(f"Администратор {admin.id} изменил баланс пользователя {user_id}")
    return UserResponse.model_validate(user)


@router.post("/users/{user_id}/reset-tasks")
async def reset_user_tasks(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    users: UserService = Depends(get_user_service)
):
    """Сбросить задачи пользователя: цепочка начинается заново"""
    try:
        await users.reset_tasks(db, user_id)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"ok": True}


# ---------- Настройки ----------

@router.get("/settings", response_model=SettingsResponse)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    platform = await SettingsService.get_settings(db)
    return SettingsResponse.model_validate(platform)


@router.post("/settings", response_model=SettingsResponse)
async def update_settings(
    data: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Изменить курс и минимумы. Существующие заявки сохраняют свой курс"""
    try:
        platform = await SettingsService.update_settings(
            db,
            usd_to_points=data.usd_to_points,
            min_deposit_usd=data.min_deposit_usd,
            min_withdraw_usd=data.min_withdraw_usd,
            manager_whatsapp=data.whatsapp,
            manager_telegram=data.telegram
        )
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return SettingsResponse.model_validate(platform)


# ---------- Задачи ----------

@router.get("/tasks", response_model=List[TaskResponse])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Весь каталог, включая неактивные задачи"""
    tasks = await CatalogService.list_tasks(db)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post("/tasks/create", response_model=TaskResponse)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """Добавить задачу в конец цепочки"""
    try:
        task = await catalog.create_task(
            db,
            title=data.title,
            reward_points=data.reward_points,
            wait_seconds=data.wait_seconds
        )
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return TaskResponse.model_validate(task)


@router.post("/tasks/{task_id}/update", response_model=TaskResponse)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """Изменить задачу (в том числе деактивировать)"""
    try:
        task = await catalog.update_task(
            db,
            task_id,
            title=data.title,
            reward_points=data.reward_points,
            wait_seconds=data.wait_seconds,
            is_active=data.is_active
        )
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return TaskResponse.model_validate(task)
