"""
Блокировки на пользователя

Каждая изменяющая операция выполняет цикл чтение-проверка-запись под
asyncio.Lock конкретного пользователя и завершается commit (или rollback при
любой ошибке). Блокировка действует в пределах процесса; в PostgreSQL
дополнительно используется SELECT ... FOR UPDATE.
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable
from weakref import WeakValueDictionary
import asyncio

from sqlalchemy.ext.asyncio import AsyncSession


class UserLockRegistry:
    """Реестр asyncio.Lock по id пользователя"""

    def __init__(self):
        self._locks: "WeakValueDictionary[Hashable, asyncio.Lock]" = WeakValueDictionary()

    def lock_for(self, user_id: Hashable) -> asyncio.Lock:
        key = str(user_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self):
        return len(self._locks)


user_locks = UserLockRegistry()


@asynccontextmanager
async def user_transaction(
    db: AsyncSession,
    user_id,
    locks: UserLockRegistry = None
) -> AsyncIterator[AsyncSession]:
    """Атомарный цикл операции над данными пользователя"""
    registry = locks if locks is not None else user_locks
    lock = registry.lock_for(user_id)
    async with lock:
        try:
            yield db
            await db.commit()
        except BaseException:
            await db.rollback()
            raise
