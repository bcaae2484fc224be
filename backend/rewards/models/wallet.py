"""
Модель заявок кошелька (пополнение / вывод)
"""
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Enum, Uuid, CheckConstraint, Index
from sqlalchemy.sql import func
import uuid
import enum

from rewards.database import Base


class WalletTransactionType(str, enum.Enum):
    """Типы заявок"""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class WalletTransactionStatus(str, enum.Enum):
    """Статусы заявок"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WalletTransaction(Base):
    """Заявка кошелька. points_delta фиксируется при создании и не пересчитывается"""
    __tablename__ = "wallet_transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        Enum(WalletTransactionType, name="wallet_transaction_type", values_callable=lambda x: [e.value for e in x]),
        nullable=False
    )
    amount_usd = Column(Float, nullable=False)
    rate_usd_to_points = Column(Integer, nullable=False)  # снимок курса на момент заявки
    points_delta = Column(Integer, nullable=False)  # +points для deposit, -points для withdraw
    status = Column(
        Enum(WalletTransactionStatus, name="wallet_transaction_status", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=WalletTransactionStatus.PENDING,
        index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    processed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (
        CheckConstraint("amount_usd > 0", name="wallet_transactions_amount_check"),
        CheckConstraint("rate_usd_to_points > 0", name="wallet_transactions_rate_check"),
        Index("idx_wallet_transactions_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return f"<WalletTransaction {self.id} {self.type} {self.points_delta} ({self.status})>"
