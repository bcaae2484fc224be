"""
Модель пользователя
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Enum, Uuid, CheckConstraint
from sqlalchemy.sql import func
import uuid
import enum

from rewards.database import Base


class UserStatus(str, enum.Enum):
    """Статусы аккаунта"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    """Пользователь"""
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=True, index=True)
    phone = Column(String, unique=True, nullable=True, index=True)
    # Баланс меняется только наградой за задачу, одобренной заявкой кошелька
    # или прямой установкой администратором
    points_balance = Column(Integer, nullable=False, default=0)
    is_admin = Column(Boolean, nullable=False, default=False, index=True)
    status = Column(
        Enum(UserStatus, name="user_status", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=UserStatus.ACTIVE,
        index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("email IS NOT NULL OR phone IS NOT NULL", name="users_contact_required"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def __repr__(self):
        return f"<User {self.id} ({self.full_name or self.email or self.phone})>"
