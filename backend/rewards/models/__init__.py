"""
SQLAlchemy модели
"""
from rewards.models.user import User, UserStatus
from rewards.models.task import Task, UserTaskProgress, TaskRun, ProgressStatus, TaskRunStatus
from rewards.models.wallet import WalletTransaction, WalletTransactionType, WalletTransactionStatus
from rewards.models.platform_settings import PlatformSettings
from rewards.models.gamification import PointsLog, PointsReason

__all__ = [
    "User",
    "UserStatus",
    "Task",
    "UserTaskProgress",
    "TaskRun",
    "ProgressStatus",
    "TaskRunStatus",
    "WalletTransaction",
    "WalletTransactionType",
    "WalletTransactionStatus",
    "PlatformSettings",
    "PointsLog",
    "PointsReason",
]
