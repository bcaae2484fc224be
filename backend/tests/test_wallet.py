# tests/test_wallet.py

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest
from sqlalchemy import select

from rewards.models.gamification import PointsLog, PointsReason
from rewards.models.user import User
from rewards.models.wallet import WalletTransaction, WalletTransactionStatus, WalletTransactionType
from rewards.services.errors import (
    BelowMinimum, InsufficientBalance, InvalidAmount, InvalidType, NotFoundError, NotPending,
    ValidationError,
)
from rewards.services.settings_service import SettingsService
from rewards.services.wallet_service import WalletService
from rewards.utils.numbers import MAX_POINTS

from .fakes import make_user


async def _balance(db, user_id) -> int:
    user = await db.get(User, user_id, populate_existing=True)
    return user.points_balance


@pytest.mark.asyncio
async def test_withdraw_below_minimum_then_insufficient(db, wallet) -> None:
    user_id = (await make_user(db, points_balance=0)).id

    with pytest.raises(BelowMinimum):
        await wallet.request_transaction(db, user_id, "withdraw", 5)
    with pytest.raises(InsufficientBalance) as excinfo:
        await wallet.request_transaction(db, user_id, "withdraw", 20)

    assert excinfo.value.required == 200
    assert excinfo.value.available == 0
    assert await WalletService.list_for_user(db, user_id) == []


@pytest.mark.asyncio
async def test_deposit_approved_once(db, wallet) -> None:
    user_id = (await make_user(db, points_balance=100)).id

    result = await wallet.request_transaction(db, user_id, "deposit", 5)
    tx = result.transaction
    assert tx.status == WalletTransactionStatus.PENDING
    assert tx.points_delta == 50
    assert tx.rate_usd_to_points == 10
    assert await _balance(db, user_id) == 100

    tx_id = tx.id
    approved = await wallet.approve(db, tx_id)
    assert approved.status == WalletTransactionStatus.APPROVED
    assert approved.processed_at is not None
    assert await _balance(db, user_id) == 150

    with pytest.raises(NotPending):
        await wallet.approve(db, tx_id)
    assert await _balance(db, user_id) == 150


@pytest.mark.asyncio
async def test_request_returns_manager_contact(db, wallet) -> None:
    user = await make_user(db)

    result = await wallet.request_transaction(db, user.id, "deposit", "10")

    assert set(result.manager) == {"title", "whatsapp", "telegram"}
    assert result.manager["whatsapp"]


@pytest.mark.asyncio
async def test_validation_order(db, wallet) -> None:
    user_id = (await make_user(db)).id

    with pytest.raises(InvalidType):
        await wallet.request_transaction(db, user_id, "transfer", "abc")
    with pytest.raises(InvalidAmount):
        await wallet.request_transaction(db, user_id, "withdraw", "abc")
    with pytest.raises(BelowMinimum):
        await wallet.request_transaction(db, user_id, "withdraw", 1)
    with pytest.raises(InsufficientBalance):
        await wallet.request_transaction(db, user_id, "withdraw", 10)


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["", "  ", "0", "-5", "nan", "inf", None, "1e30", "1e999999", 2**31])
async def test_invalid_amounts(db, wallet, amount) -> None:
    user = await make_user(db)

    with pytest.raises(InvalidAmount):
        await wallet.request_transaction(db, user.id, "deposit", amount)


@pytest.mark.asyncio
async def test_comma_decimal_and_floor(db, wallet) -> None:
    user = await make_user(db)

    result = await wallet.request_transaction(db, user.id, "deposit", "12,345")

    assert result.transaction.points_delta == 123
    assert result.transaction.amount_usd == pytest.approx(12.345)


@pytest.mark.asyncio
async def test_points_conversion_is_exact(db, wallet) -> None:
    await SettingsService.update_settings(db, usd_to_points=100, min_deposit_usd=5, min_withdraw_usd=10)
    user = await make_user(db)

    # 19.99 * 100 is 1998.9999... in binary floating point
    result = await wallet.request_transaction(db, user.id, "deposit", 19.99)

    assert result.transaction.points_delta == 1999


@pytest.mark.asyncio
async def test_rate_snapshot_survives_rate_change(db, wallet) -> None:
    user = await make_user(db)
    result = await wallet.request_transaction(db, user.id, "deposit", 10)

    await SettingsService.update_settings(db, usd_to_points=20, min_deposit_usd=5, min_withdraw_usd=10)
    approved = await wallet.approve(db, result.transaction.id)

    assert approved.rate_usd_to_points == 10
    assert approved.points_delta == 100
    assert await _balance(db, user.id) == 100


@pytest.mark.asyncio
async def test_withdraw_approval_subtracts(db, wallet) -> None:
    user = await make_user(db, points_balance=300)

    result = await wallet.request_transaction(db, user.id, "withdraw", 20)
    assert result.transaction.points_delta == -200
    assert await _balance(db, user.id) == 300

    await wallet.approve(db, result.transaction.id)
    assert await _balance(db, user.id) == 100

    log = (await db.execute(select(PointsLog).where(PointsLog.user_id == user.id))).scalars().all()
    assert [(entry.points, entry.reason) for entry in log] == [(-200, PointsReason.WALLET_WITHDRAW)]


@pytest.mark.asyncio
async def test_pending_withdrawals_can_overdraw_by_default(db, wallet) -> None:
    user = await make_user(db, points_balance=200)

    first = await wallet.request_transaction(db, user.id, "withdraw", 15)
    second = await wallet.request_transaction(db, user.id, "withdraw", 10)
    await wallet.approve(db, first.transaction.id)
    await wallet.approve(db, second.transaction.id)

    assert await _balance(db, user.id) == -50


@pytest.mark.asyncio
async def test_reserve_pending_withdrawals(db, clock, locks) -> None:
    wallet = WalletService(clock=clock, locks=locks, reserve_pending_withdrawals=True)
    user_id = (await make_user(db, points_balance=200)).id

    await wallet.request_transaction(db, user_id, "withdraw", 15)
    with pytest.raises(InsufficientBalance) as excinfo:
        await wallet.request_transaction(db, user_id, "withdraw", 10)

    assert excinfo.value.available == 50
    # deposits are not limited by pending withdrawals
    await wallet.request_transaction(db, user_id, "deposit", 10)


@pytest.mark.asyncio
async def test_reject_has_no_balance_effect(db, wallet) -> None:
    user_id = (await make_user(db, points_balance=100)).id
    admin_id = (await make_user(db, is_admin=True)).id
    result = await wallet.request_transaction(db, user_id, "deposit", 5)
    tx_id = result.transaction.id

    rejected = await wallet.reject(db, tx_id, admin_id=admin_id)

    assert rejected.status == WalletTransactionStatus.REJECTED
    assert rejected.processed_by == admin_id
    assert await _balance(db, user_id) == 100
    with pytest.raises(NotPending):
        await wallet.approve(db, tx_id)
    with pytest.raises(NotPending):
        await wallet.reject(db, tx_id)


@pytest.mark.asyncio
async def test_largest_amount_that_fits(db, wallet) -> None:
    await SettingsService.update_settings(db, usd_to_points=1, min_deposit_usd=5, min_withdraw_usd=10)
    user_id = (await make_user(db)).id

    result = await wallet.request_transaction(db, user_id, "deposit", MAX_POINTS)
    assert result.transaction.points_delta == MAX_POINTS

    # the amount fits, the amount times the rate does not
    await SettingsService.update_settings(db, usd_to_points=10, min_deposit_usd=5, min_withdraw_usd=10)
    with pytest.raises(InvalidAmount):
        await wallet.request_transaction(db, user_id, "deposit", 300_000_000)


@pytest.mark.asyncio
async def test_approval_that_overflows_balance_is_refused(db, wallet) -> None:
    user_id = (await make_user(db, points_balance=MAX_POINTS - 10)).id
    result = await wallet.request_transaction(db, user_id, "deposit", 5)
    tx_id = result.transaction.id

    with pytest.raises(ValidationError):
        await wallet.approve(db, tx_id)

    assert await _balance(db, user_id) == MAX_POINTS - 10
    tx = await db.get(WalletTransaction, tx_id, populate_existing=True)
    assert tx.status == WalletTransactionStatus.PENDING


@pytest.mark.asyncio
async def test_unknown_transaction(db, wallet) -> None:
    with pytest.raises(NotFoundError):
        await wallet.approve(db, uuid4())
    with pytest.raises(NotFoundError):
        await wallet.reject(db, uuid4())


@pytest.mark.asyncio
async def test_request_for_unknown_user(db, wallet) -> None:
    with pytest.raises(NotFoundError):
        await wallet.request_transaction(db, uuid4(), "deposit", 10)


@pytest.mark.asyncio
async def test_history_and_pending_lists(db, wallet, clock) -> None:
    user = await make_user(db, points_balance=500, email="owner@example.com")
    ids = []
    for amount in (5, 6, 7):
        result = await wallet.request_transaction(db, user.id, "deposit", amount)
        ids.append(result.transaction.id)
        clock.advance(1)
    await wallet.reject(db, ids[0])

    history = await WalletService.list_for_user(db, user.id)
    assert [tx.id for tx in history] == list(reversed(ids))

    pending = await WalletService.list_pending(db)
    assert [row["id"] for row in pending] == [ids[2], ids[1]]
    assert pending[0]["email"] == "owner@example.com"
    assert pending[0]["type"] == WalletTransactionType.DEPOSIT


@pytest.mark.asyncio
async def test_concurrent_approvals_apply_once(session_factory, wallet) -> None:
    async with session_factory() as setup:
        user = await make_user(setup, points_balance=0)
        result = await wallet.request_transaction(setup, user.id, "deposit", 10)
        tx_id = result.transaction.id

    async def approve_in_own_session():
        async with session_factory() as session:
            return await wallet.approve(session, tx_id)

    results = await asyncio.gather(
        approve_in_own_session(), approve_in_own_session(), return_exceptions=True
    )

    assert sum(isinstance(r, WalletTransaction) for r in results) == 1
    assert sum(isinstance(r, NotPending) for r in results) == 1
    async with session_factory() as check:
        assert await _balance(check, user.id) == 100
