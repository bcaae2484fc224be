# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rewards.database import init_models
from rewards.services.catalog_service import CatalogService
from rewards.services.progression_service import TaskProgressionService
from rewards.services.task_run_service import TaskRunService
from rewards.services.user_service import UserService
from rewards.services.wallet_service import WalletService
from rewards.utils.locks import UserLockRegistry

from .fakes import FakeClock, SequentialTokens


@pytest_asyncio.fixture()
async def engine(tmp_path: Path):
    """Fresh SQLite file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rewards.sqlite3'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def locks() -> UserLockRegistry:
    return UserLockRegistry()


@pytest.fixture()
def progression(clock: FakeClock, locks: UserLockRegistry) -> TaskProgressionService:
    return TaskProgressionService(clock=clock, locks=locks)


@pytest.fixture()
def task_runs(progression: TaskProgressionService, clock: FakeClock, locks: UserLockRegistry) -> TaskRunService:
    return TaskRunService(progression=progression, clock=clock, locks=locks, token_factory=SequentialTokens())


@pytest.fixture()
def wallet(clock: FakeClock, locks: UserLockRegistry) -> WalletService:
    return WalletService(clock=clock, locks=locks, reserve_pending_withdrawals=False)


@pytest.fixture()
def catalog(progression: TaskProgressionService) -> CatalogService:
    return CatalogService(progression=progression)


@pytest.fixture()
def users(progression: TaskProgressionService) -> UserService:
    return UserService(progression=progression)
