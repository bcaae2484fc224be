"""
Модели геймификации: журнал изменений баланса
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func
import uuid

from rewards.database import Base


class PointsReason:
    """Причины изменения баланса"""
    TASK_COMPLETED = "task_completed"
    WALLET_DEPOSIT = "wallet_deposit"
    WALLET_WITHDRAW = "wallet_withdraw"
    ADMIN_SET = "admin_set"


class PointsLog(Base):
    """Лог начисления баллов"""
    __tablename__ = "points_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    points = Column(Integer, nullable=False)  # может быть отрицательным
    reason = Column(String, nullable=False)
    reference_id = Column(String, nullable=True)  # id задачи или заявки кошелька
    awarded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<PointsLog {self.points} points ({self.reason})>"
