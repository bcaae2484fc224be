"""
Модели задач: каталог, прогресс пользователя и запуски
"""
from sqlalchemy import (
    Column, String, Integer, BigInteger, Boolean, DateTime, ForeignKey, Enum, Uuid,
    CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.sql import func
import uuid
import enum

from rewards.database import Base


class ProgressStatus(str, enum.Enum):
    """Статусы задачи для конкретного пользователя"""
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


class TaskRunStatus(str, enum.Enum):
    """Статусы запуска задачи"""
    RUNNING = "running"
    COMPLETED = "completed"
    EXPIRED = "expired"


class Task(Base):
    """Задача каталога (не удаляется, только деактивируется)"""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    order_index = Column(Integer, nullable=False, unique=True, index=True)
    reward_points = Column(Integer, nullable=False, default=0)
    wait_seconds = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("LENGTH(TRIM(title)) > 0", name="tasks_title_not_empty"),
        CheckConstraint("order_index > 0", name="tasks_order_index_check"),
        CheckConstraint("reward_points >= 0", name="tasks_reward_check"),
        CheckConstraint("wait_seconds >= 1", name="tasks_wait_check"),
    )

    def __repr__(self):
        return f"<Task {self.id} ({self.title}, order: {self.order_index})>"


class UserTaskProgress(Base):
    """Прогресс пользователя по задаче (одна строка на пару user/task)"""
    __tablename__ = "user_task_progress"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="RESTRICT"), nullable=False, index=True)
    status = Column(
        Enum(ProgressStatus, name="progress_status", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ProgressStatus.LOCKED
    )
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    earned_points = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "task_id", name="uq_user_task_progress_pair"),
    )

    def __repr__(self):
        return f"<UserTaskProgress task={self.task_id} ({self.status})>"


class TaskRun(Base):
    """Запуск задачи: таймер ожидания и токен для завершения"""
    __tablename__ = "task_runs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="RESTRICT"), nullable=False, index=True)
    run_token = Column(String, nullable=False, unique=True)
    started_at = Column(DateTime(timezone=True), nullable=False)
    expected_finish_ms = Column(BigInteger, nullable=False)  # epoch ms
    finished_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(
        Enum(TaskRunStatus, name="task_run_status", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TaskRunStatus.RUNNING
    )

    __table_args__ = (
        Index("idx_task_runs_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<TaskRun {self.id} task={self.task_id} ({self.status})>"
