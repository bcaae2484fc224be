"""
Сервис запусков задач: таймер ожидания и завершение по токену
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from dataclasses import dataclass
from typing import Callable, Optional
from uuid import UUID
import logging

from rewards.models.user import User
from rewards.models.task import Task, TaskRun, ProgressStatus, TaskRunStatus
from rewards.services.errors import (
    NotFoundError, NoTaskReady, RunInProgress, InvalidRun, TooEarly, TaskNotReady,
)
from rewards.services.progression_service import TaskProgressionService
from rewards.utils.clock import Clock, SystemClock, epoch_ms, new_run_token
from rewards.utils.locks import UserLockRegistry, user_locks, user_transaction

logger = logging.getLogger(__name__)


@dataclass
class StartedRun:
    run_token: str
    task_id: int
    wait_seconds: int
    expected_finish_ms: int


@dataclass
class FinishedRun:
    task_id: int
    earned_points: int
    balance: int


class TaskRunService:
    """Старт и завершение задачи"""

    def __init__(
        self,
        progression: TaskProgressionService = None,
        clock: Clock = None,
        locks: UserLockRegistry = None,
        token_factory: Callable[[], str] = None
    ):
        self.clock = clock or SystemClock()
        self.locks = locks if locks is not None else user_locks
        self.progression = progression or TaskProgressionService(clock=self.clock, locks=self.locks)
        self.token_factory = token_factory or new_run_token

    @staticmethod
    async def get_running_run(db: AsyncSession, user_id: UUID) -> Optional[TaskRun]:
        result = await db.execute(
            select(TaskRun)
            .where(and_(TaskRun.user_id == user_id, TaskRun.status == TaskRunStatus.RUNNING))
            .order_by(TaskRun.started_at.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def start(self, db: AsyncSession, user_id: UUID) -> StartedRun:
        """Запустить доступную задачу"""
        async with user_transaction(db, user_id, self.locks):
            user = await db.get(User, user_id, populate_existing=True)
            if user is None:
                raise NotFoundError("User not found")

            pairs = await self.progression.reconcile(db, user_id)
            available = [(task, row) for task, row in pairs if row.status == ProgressStatus.AVAILABLE]
            if not available:
                raise NoTaskReady()
            # pairs уже отсортированы по order_index
            task, row = available[0]

            if await self.get_running_run(db, user_id) is not None:
                raise RunInProgress()

            now = self.clock.now()
            expected_finish_ms = epoch_ms(now) + task.wait_seconds * 1000
            run = TaskRun(
                user_id=user_id,
                task_id=task.id,
                run_token=self.token_factory(),
                started_at=now,
                expected_finish_ms=expected_finish_ms,
                status=TaskRunStatus.RUNNING
            )
            db.add(run)
            row.started_at = now
            await db.flush()

        logger.info(f"Пользователь {user_id} начал задачу {task.id} (ожидание {task.wait_seconds}s)")
        return StartedRun(
            run_token=run.run_token,
            task_id=task.id,
            wait_seconds=task.wait_seconds,
            expected_finish_ms=expected_finish_ms
        )

    async def finish(self, db: AsyncSession, user_id: UUID, run_token: str) -> FinishedRun:
        """Завершить запуск, если время ожидания истекло"""
        async with user_transaction(db, user_id, self.locks):
            result = await db.execute(
                select(TaskRun)
                .where(and_(
                    TaskRun.run_token == run_token,
                    TaskRun.user_id == user_id,
                    TaskRun.status == TaskRunStatus.RUNNING
                ))
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            run = result.scalar_one_or_none()
            if run is None:
                raise InvalidRun()

            now = self.clock.now()
            now_ms = epoch_ms(now)
            if now_ms < run.expected_finish_ms:
                logger.info(f"Пользователь {user_id} завершает задачу {run.task_id} слишком рано")
                raise TooEarly(run.expected_finish_ms - now_ms)

            await self.progression.reconcile(db, user_id)

            task = await db.get(Task, run.task_id, populate_existing=True)
            if task is None or not task.is_active:
                raise TaskNotReady()
            row = await self.progression.get_progress_row(db, user_id, task.id)
            if row is None or row.status != ProgressStatus.AVAILABLE:
                raise TaskNotReady()

            completed = await self.progression.complete(db, user_id, task.id)
            run.status = TaskRunStatus.COMPLETED
            run.finished_at = now

            user = await db.get(User, user_id)
            balance = user.points_balance
            earned = completed.earned_points

        logger.info(f"Пользователь {user_id} завершил запуск задачи {task.id}, баланс {balance}")
        return FinishedRun(task_id=task.id, earned_points=earned, balance=balance)
