"""
Утилиты
"""
from rewards.utils.auth import create_access_token, verify_token
from rewards.utils.clock import Clock, SystemClock, epoch_ms, new_run_token
from rewards.utils.locks import UserLockRegistry, user_locks, user_transaction

__all__ = [
    "create_access_token",
    "verify_token",
    "Clock",
    "SystemClock",
    "epoch_ms",
    "new_run_token",
    "UserLockRegistry",
    "user_locks",
    "user_transaction",
]
