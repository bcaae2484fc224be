"""
Зависимости FastAPI для сервисов

Сервисы создаются один раз на процесс и делят общий реестр блокировок.
Тесты подменяют их через app.dependency_overrides.
"""
from rewards.services.progression_service import TaskProgressionService
from rewards.services.task_run_service import TaskRunService
from rewards.services.wallet_service import WalletService
from rewards.services.catalog_service import CatalogService
from rewards.services.user_service import UserService
from rewards.utils.clock import SystemClock
from rewards.utils.locks import user_locks

_clock = SystemClock()
_progression = TaskProgressionService(clock=_clock, locks=user_locks)
_task_runs = TaskRunService(progression=_progression, clock=_clock, locks=user_locks)
_wallet = WalletService(clock=_clock, locks=user_locks)
_catalog = CatalogService(progression=_progression)
_users = UserService(progression=_progression)


def get_progression_service() -> TaskProgressionService:
    return _progression


def get_task_run_service() -> TaskRunService:
    return _task_runs


def get_wallet_service() -> WalletService:
    return _wallet


def get_catalog_service() -> CatalogService:
    return _catalog


def get_user_service() -> UserService:
    return _users
