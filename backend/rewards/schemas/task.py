"""
Pydantic схемы для задач
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime

from rewards.models.task import ProgressStatus


class TaskResponse(BaseModel):
    """Задача каталога"""
    id: int
    title: str
    order_index: int
    reward_points: int
    wait_seconds: int
    is_active: bool

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    """Новая задача добавляется в конец цепочки"""
    title: str
    reward_points: Union[float, str] = 0
    wait_seconds: Union[float, str] = Field(..., description="Время ожидания в секундах (>= 1)")


class TaskUpdate(BaseModel):
    """Изменение задачи; незаданные поля не меняются"""
    title: Optional[str] = None
    reward_points: Optional[Union[float, str]] = None
    wait_seconds: Optional[Union[float, str]] = None
    is_active: Optional[bool] = None


class TaskProgressItem(BaseModel):
    """Задача со статусом для текущего пользователя"""
    id: int
    title: str
    order_index: int
    reward_points: int
    wait_seconds: int
    status: ProgressStatus
    completed_at: Optional[datetime] = None
    earned_points: int = 0


class TaskListResponse(BaseModel):
    rows: List[TaskProgressItem]


class TaskStartResponse(BaseModel):
    run_token: str
    task_id: int
    wait_seconds: int
    expected_finish_ms: int


class TaskFinishRequest(BaseModel):
    run_token: str = Field(..., min_length=1)


class TaskFinishResponse(BaseModel):
    task_id: int
    earned_points: int
    points_balance: int
