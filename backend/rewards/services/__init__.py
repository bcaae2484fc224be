"""
Сервисы для бизнес-логики
"""
from rewards.services.progression_service import TaskProgressionService
from rewards.services.task_run_service import TaskRunService, StartedRun, FinishedRun
from rewards.services.wallet_service import WalletService, WalletRequestResult
from rewards.services.catalog_service import CatalogService
from rewards.services.settings_service import SettingsService
from rewards.services.user_service import UserService

__all__ = [
    "TaskProgressionService",
    "TaskRunService",
    "StartedRun",
    "FinishedRun",
    "WalletService",
    "WalletRequestResult",
    "CatalogService",
    "SettingsService",
    "UserService",
]
