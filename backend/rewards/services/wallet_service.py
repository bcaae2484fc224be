"""
Сервис кошелька: заявки на пополнение и вывод

Заявка фиксирует курс и points_delta в момент создания. Баланс меняется
ровно один раз - при одобрении заявки администратором. Отклонение баланс
не меняет.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from dataclasses import dataclass
from typing import Any, List, Dict, Optional
from uuid import UUID
import logging

from rewards.config import settings
from rewards.models.user import User
from rewards.models.wallet import WalletTransaction, WalletTransactionType, WalletTransactionStatus
from rewards.models.gamification import PointsLog, PointsReason
from rewards.services.errors import (
    InvalidType, InvalidAmount, BelowMinimum, InsufficientBalance, NotFoundError, NotPending,
    ValidationError,
)
from rewards.services.settings_service import SettingsService
from rewards.utils.clock import Clock, SystemClock
from rewards.utils.locks import UserLockRegistry, user_locks, user_transaction
from rewards.utils.numbers import parse_decimal, points_in_range, usd_to_points

logger = logging.getLogger(__name__)

USER_HISTORY_LIMIT = 30
PENDING_LIST_LIMIT = 200


@dataclass
class WalletRequestResult:
    transaction: WalletTransaction
    manager: Dict[str, Optional[str]]


class WalletService:
    """Заявки кошелька"""

    def __init__(
        self,
        clock: Clock = None,
        locks: UserLockRegistry = None,
        reserve_pending_withdrawals: bool = None
    ):
        self.clock = clock or SystemClock()
        self.locks = locks if locks is not None else user_locks
        if reserve_pending_withdrawals is None:
            reserve_pending_withdrawals = settings.WALLET_RESERVE_PENDING_WITHDRAWALS
        self.reserve_pending_withdrawals = reserve_pending_withdrawals

    @staticmethod
    def parse_type(tx_type: Any) -> WalletTransactionType:
        try:
            return WalletTransactionType(tx_type)
        except ValueError:
            raise InvalidType()

    @staticmethod
    async def _pending_withdraw_points(db: AsyncSession, user_id: UUID) -> int:
        result = await db.execute(
            select(func.coalesce(func.sum(WalletTransaction.points_delta), 0)).where(and_(
                WalletTransaction.user_id == user_id,
                WalletTransaction.type == WalletTransactionType.WITHDRAW,
                WalletTransaction.status == WalletTransactionStatus.PENDING
            ))
        )
        return -int(result.scalar_one())

    async def request_transaction(
        self,
        db: AsyncSession,
        user_id: UUID,
        tx_type: Any,
        amount_usd: Any
    ) -> WalletRequestResult:
        """Создать заявку на пополнение или вывод в статусе pending"""
        kind = self.parse_type(tx_type)
        amount = parse_decimal(amount_usd)
        if amount is None or amount <= 0:
            raise InvalidAmount()

        async with user_transaction(db, user_id, self.locks):
            user = await db.get(User, user_id, populate_existing=True, with_for_update=True)
            if user is None:
                raise NotFoundError("User not found")

            platform = await SettingsService.get_settings(db)
            if kind == WalletTransactionType.DEPOSIT:
                minimum_usd = platform.min_deposit_usd
            else:
                minimum_usd = platform.min_withdraw_usd
            if amount < parse_decimal(minimum_usd):
                raise BelowMinimum(minimum=minimum_usd)

            rate = platform.usd_to_points
            points = usd_to_points(amount, rate)
            if points is None:
                raise InvalidAmount("Amount is too large")

            if kind == WalletTransactionType.WITHDRAW:
                available = user.points_balance
                if self.reserve_pending_withdrawals:
                    available -= await self._pending_withdraw_points(db, user_id)
                if points > available:
                    logger.info(f"Заявка на вывод отклонена: нужно {points}, доступно {available} (пользователь {user_id})")
                    raise InsufficientBalance(required=points, available=available)

            transaction = WalletTransaction(
                user_id=user_id,
                type=kind,
                amount_usd=float(amount),
                rate_usd_to_points=rate,
                points_delta=points if kind == WalletTransactionType.DEPOSIT else -points,
                status=WalletTransactionStatus.PENDING,
                created_at=self.clock.now()
            )
            db.add(transaction)
            await db.flush()
            manager = platform.manager_contact

        logger.info(
            f"Заявка {transaction.id} ({kind.value}, {amount}$ -> {transaction.points_delta} баллов) "
            f"создана пользователем {user_id}"
        )
        return WalletRequestResult(transaction=transaction, manager=manager)

    async def _decide(
        self,
        db: AsyncSession,
        tx_id: UUID,
        approve: bool,
        admin_id: Optional[UUID] = None
    ) -> WalletTransaction:
        transaction = await db.get(WalletTransaction, tx_id, populate_existing=True)
        if transaction is None:
            raise NotFoundError("Transaction not found")
        owner_id = transaction.user_id

        async with user_transaction(db, owner_id, self.locks):
            # Перечитываем под блокировкой владельца
            transaction = await db.get(WalletTransaction, tx_id, populate_existing=True, with_for_update=True)
            if transaction is None:
                raise NotFoundError("Transaction not found")
            if transaction.status != WalletTransactionStatus.PENDING:
                raise NotPending()

            if approve:
                user = await db.get(User, owner_id, populate_existing=True, with_for_update=True)
                if user is None:
                    raise NotFoundError("User not found")
                # Баланс может уйти в минус: проверка была при создании заявки
                new_balance = (user.points_balance or 0) + transaction.points_delta
                if not points_in_range(new_balance):
                    raise ValidationError("Balance out of range")
                user.points_balance = new_balance
                db.add(PointsLog(
                    user_id=owner_id,
                    points=transaction.points_delta,
                    reason=(
                        PointsReason.WALLET_DEPOSIT
                        if transaction.type == WalletTransactionType.DEPOSIT
                        else PointsReason.WALLET_WITHDRAW
                    ),
                    reference_id=str(transaction.id)
                ))
                transaction.status = WalletTransactionStatus.APPROVED
            else:
                transaction.status = WalletTransactionStatus.REJECTED

            transaction.processed_at = self.clock.now()
            transaction.processed_by = admin_id
            await db.flush()

        logger.info(f"Заявка {tx_id} {transaction.status.value} (администратор {admin_id})")
        return transaction

    async def approve(self, db: AsyncSession, tx_id: UUID, admin_id: Optional[UUID] = None) -> WalletTransaction:
        """Одобрить заявку и применить points_delta к балансу"""
        return await self._decide(db, tx_id, approve=True, admin_id=admin_id)

    async def reject(self, db: AsyncSession, tx_id: UUID, admin_id: Optional[UUID] = None) -> WalletTransaction:
        """Отклонить заявку без изменения баланса"""
        return await self._decide(db, tx_id, approve=False, admin_id=admin_id)

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: UUID, limit: int = USER_HISTORY_LIMIT) -> List[WalletTransaction]:
        """Последние заявки пользователя, новые первыми"""
        result = await db.execute(
            select(WalletTransaction)
            .where(WalletTransaction.user_id == user_id)
            .order_by(WalletTransaction.created_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_pending(db: AsyncSession, limit: int = PENDING_LIST_LIMIT) -> List[Dict]:
        """Ожидающие заявки с данными владельца, новые первыми"""
        result = await db.execute(
            select(WalletTransaction, User.full_name, User.email, User.phone)
            .join(User, User.id == WalletTransaction.user_id)
            .where(WalletTransaction.status == WalletTransactionStatus.PENDING)
            .order_by(WalletTransaction.created_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        rows = []
        for transaction, full_name, email, phone in result.all():
            rows.append({
                "id": transaction.id,
                "user_id": transaction.user_id,
                "type": transaction.type,
                "amount_usd": transaction.amount_usd,
                "rate_usd_to_points": transaction.rate_usd_to_points,
                "points_delta": transaction.points_delta,
                "status": transaction.status,
                "created_at": transaction.created_at,
                "full_name": full_name,
                "email": email,
                "phone": phone,
            })
        return rows
