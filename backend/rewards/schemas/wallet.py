"""
Pydantic схемы для кошелька
"""
from pydantic import BaseModel
from typing import Optional, List, Union
from datetime import datetime
from uuid import UUID

from rewards.models.wallet import WalletTransactionType, WalletTransactionStatus
from rewards.schemas.settings import ManagerContact


class WalletRequestCreate(BaseModel):
    """Заявка на пополнение или вывод. Сумма допускает запятую ("12,5")"""
    type: str
    amount_usd: Union[float, str]


class WalletTransactionResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: WalletTransactionType
    amount_usd: float
    rate_usd_to_points: int
    points_delta: int
    status: WalletTransactionStatus
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[UUID] = None

    class Config:
        from_attributes = True


class WalletRequestResponse(BaseModel):
    transaction: WalletTransactionResponse
    manager: ManagerContact


class WalletHistoryResponse(BaseModel):
    rows: List[WalletTransactionResponse]


class PendingRequestItem(WalletTransactionResponse):
    """Ожидающая заявка с данными владельца"""
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PendingRequestsResponse(BaseModel):
    rows: List[PendingRequestItem]
