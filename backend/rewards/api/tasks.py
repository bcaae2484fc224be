"""
API endpoints для задач пользователя
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from rewards.database import get_db
from rewards.models.user import User
from rewards.schemas.task import (
    TaskListResponse, TaskProgressItem, TaskStartResponse, TaskFinishRequest, TaskFinishResponse
)
from rewards.services.errors import RewardsError
from rewards.services.progression_service import TaskProgressionService
from rewards.services.task_run_service import TaskRunService
from rewards.api.deps import get_progression_service, get_task_run_service
from rewards.utils.permissions import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=TaskListResponse)
async def list_my_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    progression: TaskProgressionService = Depends(get_progression_service)
):
    """Активные задачи со статусом для текущего пользователя"""
    try:
        rows = await progression.list_progress(db, current_user.id)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return TaskListResponse(rows=[TaskProgressItem(**row) for row in rows])


@router.post("/start", response_model=TaskStartResponse)
async def start_task(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    task_runs: TaskRunService = Depends(get_task_run_service)
):
    """
    Начать доступную задачу

    Возвращает run_token, который нужно передать в /tasks/finish
    после окончания ожидания.
    """
    try:
        started = await task_runs.start(db, current_user.id)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return TaskStartResponse(
        run_token=started.run_token,
        task_id=started.task_id,
        wait_seconds=started.wait_seconds,
        expected_finish_ms=started.expected_finish_ms
    )


@router.post("/finish", response_model=TaskFinishResponse)
async def finish_task(
    data: TaskFinishRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    task_runs: TaskRunService = Depends(get_task_run_service)
):
    """Завершить задачу и получить награду"""
    try:
        finished = await task_runs.finish(db, current_user.id, data.run_token)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return TaskFinishResponse(
        task_id=finished.task_id,
        earned_points=finished.earned_points,
        points_balance=finished.balance
    )
