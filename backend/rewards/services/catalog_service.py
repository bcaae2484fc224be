"""
Сервис каталога задач (администрирование)
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Any, List, Optional
import logging

from rewards.models.task import Task
from rewards.services.errors import ValidationError, NotFoundError
from rewards.services.progression_service import TaskProgressionService
from rewards.utils.numbers import MAX_POINTS, parse_decimal, floor_int

logger = logging.getLogger(__name__)

CATALOG_LOCK_KEY = "catalog"


def _clean_title(title: Any) -> str:
    title = str(title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    return title


def _clean_reward(value: Any) -> int:
    number = parse_decimal(value)
    if number is None or number < 0 or number > MAX_POINTS:
        raise ValidationError("reward_points is invalid")
    return floor_int(number)


def _clean_wait(value: Any) -> int:
    number = parse_decimal(value)
    if number is None or number < 1 or number > MAX_POINTS:
        raise ValidationError("wait_seconds is invalid")
    return floor_int(number)


class CatalogService:
    """Создание и изменение задач. Задачи не удаляются, только деактивируются"""

    def __init__(self, progression: TaskProgressionService = None):
        self.progression = progression or TaskProgressionService()

    @staticmethod
    async def list_tasks(db: AsyncSession) -> List[Task]:
        """Все задачи (включая неактивные) по order_index"""
        result = await db.execute(
            select(Task).order_by(Task.order_index).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create_task(
        self,
        db: AsyncSession,
        title: Any,
        reward_points: Any,
        wait_seconds: Any
    ) -> Task:
        """Добавить задачу в конец цепочки и синхронизировать пользователей"""
        task = Task(
            title=_clean_title(title),
            reward_points=_clean_reward(reward_points),
            wait_seconds=_clean_wait(wait_seconds),
            is_active=True
        )

        # order_index уникален: чтение максимума и вставка под одной блокировкой
        async with self.progression.locks.lock_for(CATALOG_LOCK_KEY):
            max_order = (await db.execute(select(func.max(Task.order_index)))).scalar_one_or_none()
            task.order_index = (max_order or 0) + 1
            db.add(task)
            await db.commit()
        await db.refresh(task)
        logger.info(f"Задача {task.id} «{task.title}» создана (order {task.order_index})")

        await self.progression.resync_all(db)
        return task

    async def update_task(
        self,
        db: AsyncSession,
        task_id: int,
        title: Any = None,
        reward_points: Any = None,
        wait_seconds: Any = None,
        is_active: Optional[bool] = None
    ) -> Task:
        """Изменить задачу; незаданные поля остаются прежними"""
        task = await db.get(Task, task_id, populate_existing=True)
        if task is None:
            raise NotFoundError("Task not found")

        new_title = _clean_title(task.title if title is None else title)
        new_reward = _clean_reward(task.reward_points if reward_points is None else reward_points)
        new_wait = _clean_wait(task.wait_seconds if wait_seconds is None else wait_seconds)

        task.title = new_title
        task.reward_points = new_reward
        task.wait_seconds = new_wait
        if is_active is not None:
            task.is_active = bool(is_active)

        await db.commit()
        await db.refresh(task)
        logger.info(f"Задача {task.id} обновлена (active={task.is_active})")

        await self.progression.resync_all(db)
        return task
