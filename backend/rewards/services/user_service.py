"""
Сервис пользователей (администрирование)
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Any, List, Optional
from uuid import UUID
import logging

from rewards.config import settings
from rewards.models.user import User, UserStatus
from rewards.models.gamification import PointsLog, PointsReason
from rewards.services.errors import ValidationError, NotFoundError
from rewards.services.progression_service import TaskProgressionService
from rewards.utils.locks import user_transaction
from rewards.utils.numbers import MAX_POINTS, parse_decimal, floor_int

logger = logging.getLogger(__name__)

USER_LIST_LIMIT = 300


def _normalize_contact(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class UserService:
    """Создание пользователей и прямое изменение баланса"""

    def __init__(self, progression: TaskProgressionService = None):
        self.progression = progression or TaskProgressionService()

    @staticmethod
    async def get_user(db: AsyncSession, user_id: UUID) -> Optional[User]:
        return await db.get(User, user_id, populate_existing=True)

    @staticmethod
    async def list_users(db: AsyncSession, limit: int = USER_LIST_LIMIT) -> List[User]:
        """Пользователи без администраторов, новые первыми"""
        result = await db.execute(
            select(User)
            .where(User.is_admin == False)  # noqa: E712
            .order_by(User.created_at.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create_user(
        self,
        db: AsyncSession,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        is_admin: bool = False
    ) -> User:
        """Создать пользователя и подготовить его прогресс с начала"""
        email = _normalize_contact(email)
        if email:
            email = email.lower()
        phone = _normalize_contact(phone)
        if not email and not phone:
            raise ValidationError("Email or phone is required")

        conditions = []
        if email:
            conditions.append(User.email == email)
        if phone:
            conditions.append(User.phone == phone)
        existing = await db.execute(select(User.id).where(or_(*conditions)))
        if existing.first() is not None:
            raise ValidationError("Account already exists")

        user = User(
            full_name=_normalize_contact(full_name),
            email=email,
            phone=phone,
            points_balance=0,
            is_admin=is_admin,
            status=UserStatus.ACTIVE
        )
        db.add(user)
        await db.flush()

        async with user_transaction(db, user.id, self.progression.locks):
            if not is_admin:
                await self.progression.apply_reset(db, user.id)

        await db.refresh(user)
        logger.info(f"Создан пользователь {user.id} ({email or phone})")
        return user

    async def set_points(self, db: AsyncSession, user_id: UUID, points: Any) -> User:
        """Установить баланс пользователя напрямую (округление вниз)"""
        number = parse_decimal(points)
        if number is None or number < 0 or number > MAX_POINTS:
            raise ValidationError("Points value is invalid")
        new_balance = floor_int(number)

        async with user_transaction(db, user_id, self.progression.locks):
            user = await db.get(User, user_id, populate_existing=True, with_for_update=True)
            if user is None or user.is_admin:
                raise NotFoundError("User not found")

            delta = new_balance - (user.points_balance or 0)
            user.points_balance = new_balance
            if delta:
                db.add(PointsLog(
                    user_id=user_id,
                    points=delta,
                    reason=PointsReason.ADMIN_SET,
                    reference_id=None
                ))
            await db.flush()

        logger.info(f"Баланс пользователя {user_id} установлен: {new_balance}")
        return user

    async def reset_tasks(self, db: AsyncSession, user_id: UUID) -> None:
        """Сбросить задачи обычного пользователя"""
        user = await db.get(User, user_id, populate_existing=True)
        if user is None or user.is_admin:
            raise NotFoundError("User not found")
        await self.progression.reset_progress(db, user_id)

    @staticmethod
    async def ensure_admin(db: AsyncSession, email: str = None) -> User:
        """Создать администратора, если в системе его нет"""
        result = await db.execute(select(User).where(User.is_admin == True).limit(1))  # noqa: E712
        admin = result.scalar_one_or_none()
        if admin is not None:
            return admin

        admin = User(
            full_name="Admin",
            email=(email or settings.ADMIN_EMAIL).lower(),
            points_balance=0,
            is_admin=True,
            status=UserStatus.ACTIVE
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        logger.info(f"✅ Администратор создан: {admin.email}")
        return admin
