"""
Сервис прогрессии задач

Для каждого пользователя среди активных задач ровно одна строка прогресса
находится в статусе available: задача с наименьшим order_index, которая ещё
не выполнена. Остальные невыполненные задачи - locked.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from typing import List, Dict, Tuple, Optional
from uuid import UUID
import logging

from rewards.models.user import User
from rewards.models.task import Task, UserTaskProgress, TaskRun, ProgressStatus, TaskRunStatus
from rewards.models.gamification import PointsLog, PointsReason
from rewards.services.errors import NotFoundError, NotEligible, ValidationError
from rewards.utils.clock import Clock, SystemClock
from rewards.utils.locks import UserLockRegistry, user_locks, user_transaction
from rewards.utils.numbers import points_in_range

logger = logging.getLogger(__name__)


class TaskProgressionService:
    """Материализация, сверка и продвижение прогресса пользователя"""

    def __init__(self, clock: Clock = None, locks: UserLockRegistry = None):
        self.clock = clock or SystemClock()
        self.locks = locks if locks is not None else user_locks

    @staticmethod
    async def get_active_tasks(db: AsyncSession) -> List[Task]:
        """Активные задачи по возрастанию order_index"""
        result = await db.execute(
            select(Task)
            .where(Task.is_active == True)  # noqa: E712
            .order_by(Task.order_index)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def _progress_by_task(
        db: AsyncSession,
        user_id: UUID,
        for_update: bool = False
    ) -> Dict[int, UserTaskProgress]:
        query = (
            select(UserTaskProgress)
            .where(UserTaskProgress.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return {row.task_id: row for row in result.scalars().all()}

    async def materialize(self, db: AsyncSession, user_id: UUID) -> int:
        """
        Создать недостающие строки прогресса

        Новая строка получает available, только если её задача первая среди
        активных. Существующие строки не меняются. Возвращает число созданных строк.
        """
        tasks = await self.get_active_tasks(db)
        if not tasks:
            return 0

        first_order = tasks[0].order_index
        existing = await self._progress_by_task(db, user_id)
        created = 0
        for task in tasks:
            if task.id in existing:
                continue
            db.add(UserTaskProgress(
                user_id=user_id,
                task_id=task.id,
                status=ProgressStatus.AVAILABLE if task.order_index == first_order else ProgressStatus.LOCKED,
                earned_points=0
            ))
            created += 1

        if created:
            await db.flush()
        return created

    async def reconcile(self, db: AsyncSession, user_id: UUID) -> List[Tuple[Task, UserTaskProgress]]:
        """
        Восстановить инварианты прогресса и вернуть пары (задача, строка)

        Доступной остаётся первая невыполненная задача по order_index, все
        остальные невыполненные блокируются. Выполненные строки не трогаются.
        Вызывающий код должен держать блокировку пользователя.
        """
        await self.materialize(db, user_id)

        tasks = await self.get_active_tasks(db)
        progress = await self._progress_by_task(db, user_id, for_update=True)
        pairs = [(task, progress[task.id]) for task in tasks if task.id in progress]

        pending = [row for _, row in pairs if row.status != ProgressStatus.COMPLETED]
        if not pending:
            return pairs

        target = pending[0]
        repaired = 0
        for row in pending:
            wanted = ProgressStatus.AVAILABLE if row is target else ProgressStatus.LOCKED
            if row.status != wanted:
                row.status = wanted
                repaired += 1

        if repaired:
            logger.info(f"Прогресс пользователя {user_id} исправлен: {repaired} строк, доступна задача {target.task_id}")
            await db.flush()
        return pairs

    async def complete(self, db: AsyncSession, user_id: UUID, task_id: int) -> UserTaskProgress:
        """
        Отметить задачу выполненной, открыть следующую и начислить награду

        Вызывающий код должен держать блокировку пользователя.
        """
        task = await db.get(Task, task_id, populate_existing=True)
        if task is None:
            raise NotFoundError("Task not found")
        if not task.is_active:
            raise NotEligible("Task is not active")

        result = await db.execute(
            select(UserTaskProgress)
            .where(and_(UserTaskProgress.user_id == user_id, UserTaskProgress.task_id == task_id))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Task progress not found")
        if row.status != ProgressStatus.AVAILABLE:
            raise NotEligible()

        user = await db.get(User, user_id, populate_existing=True, with_for_update=True)
        if user is None:
            raise NotFoundError("User not found")
        new_balance = (user.points_balance or 0) + task.reward_points
        if not points_in_range(new_balance):
            raise ValidationError("Balance out of range")

        row.status = ProgressStatus.COMPLETED
        row.completed_at = self.clock.now()
        row.earned_points = task.reward_points

        next_result = await db.execute(
            select(Task)
            .where(and_(Task.is_active == True, Task.order_index > task.order_index))  # noqa: E712
            .order_by(Task.order_index)
            .limit(1)
        )
        next_task = next_result.scalar_one_or_none()
        if next_task is not None:
            next_row_result = await db.execute(
                select(UserTaskProgress).where(
                    and_(UserTaskProgress.user_id == user_id, UserTaskProgress.task_id == next_task.id)
                ).with_for_update()
            )
            next_row = next_row_result.scalar_one_or_none()
            if next_row is not None and next_row.status == ProgressStatus.LOCKED:
                next_row.status = ProgressStatus.AVAILABLE

        user.points_balance = new_balance
        db.add(PointsLog(
            user_id=user_id,
            points=task.reward_points,
            reason=PointsReason.TASK_COMPLETED,
            reference_id=str(task.id)
        ))

        await db.flush()
        logger.info(f"Пользователь {user_id} выполнил задачу {task.id} (+{task.reward_points} баллов)")
        return row

    async def apply_reset(self, db: AsyncSession, user_id: UUID) -> None:
        """Вернуть прогресс к начальному состоянию без блокировки и commit"""
        await self.materialize(db, user_id)

        tasks = await self.get_active_tasks(db)
        progress = await self._progress_by_task(db, user_id, for_update=True)
        first_order = tasks[0].order_index if tasks else None

        for task in tasks:
            row = progress.get(task.id)
            if row is None:
                continue
            row.status = ProgressStatus.AVAILABLE if task.order_index == first_order else ProgressStatus.LOCKED
            row.started_at = None
            row.completed_at = None
            row.earned_points = 0

        now = self.clock.now()
        runs_result = await db.execute(
            select(TaskRun).where(
                and_(TaskRun.user_id == user_id, TaskRun.status == TaskRunStatus.RUNNING)
            ).with_for_update()
        )
        for run in runs_result.scalars().all():
            run.status = TaskRunStatus.EXPIRED
            run.finished_at = now

        await db.flush()

    async def reset_progress(self, db: AsyncSession, user_id: UUID) -> None:
        """Сбросить прогресс пользователя (администратор)"""
        async with user_transaction(db, user_id, self.locks):
            user = await db.get(User, user_id, populate_existing=True)
            if user is None:
                raise NotFoundError("User not found")
            await self.apply_reset(db, user_id)
        logger.info(f"Прогресс пользователя {user_id} сброшен")

    async def list_progress(self, db: AsyncSession, user_id: UUID) -> List[Dict]:
        """Список активных задач со статусом для пользователя"""
        async with user_transaction(db, user_id, self.locks):
            user = await db.get(User, user_id, populate_existing=True)
            if user is None:
                raise NotFoundError("User not found")
            pairs = await self.reconcile(db, user_id)

        return [
            {
                "id": task.id,
                "title": task.title,
                "order_index": task.order_index,
                "reward_points": task.reward_points,
                "wait_seconds": task.wait_seconds,
                "status": row.status,
                "completed_at": row.completed_at,
                "earned_points": row.earned_points,
            }
            for task, row in pairs
        ]

    async def summary(self, db: AsyncSession, user_id: UUID) -> Dict[str, int]:
        """Сколько активных задач всего и сколько выполнено"""
        total_result = await db.execute(
            select(func.count(Task.id)).where(Task.is_active == True)  # noqa: E712
        )
        done_result = await db.execute(
            select(func.count(UserTaskProgress.id))
            .join(Task, Task.id == UserTaskProgress.task_id)
            .where(and_(
                UserTaskProgress.user_id == user_id,
                UserTaskProgress.status == ProgressStatus.COMPLETED,
                Task.is_active == True  # noqa: E712
            ))
        )
        return {"total": total_result.scalar_one(), "done": done_result.scalar_one()}

    async def resync_all(self, db: AsyncSession) -> int:
        """Сверить прогресс всех пользователей (после изменения каталога)"""
        result = await db.execute(select(User.id).where(User.is_admin == False))  # noqa: E712
        user_ids = list(result.scalars().all())
        # Закрываем транзакцию чтения до захвата блокировок
        await db.commit()

        for user_id in user_ids:
            async with user_transaction(db, user_id, self.locks):
                await self.reconcile(db, user_id)

        logger.info(f"Прогресс синхронизирован для {len(user_ids)} пользователей")
        return len(user_ids)

    async def get_progress_row(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_id: int
    ) -> Optional[UserTaskProgress]:
        result = await db.execute(
            select(UserTaskProgress)
            .where(and_(UserTaskProgress.user_id == user_id, UserTaskProgress.task_id == task_id))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()
