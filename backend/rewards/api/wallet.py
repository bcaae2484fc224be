"""
API endpoints для кошелька
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from rewards.database import get_db
from rewards.models.user import User
from rewards.schemas.settings import ManagerContact
from rewards.schemas.wallet import (
    WalletRequestCreate, WalletRequestResponse, WalletTransactionResponse, WalletHistoryResponse
)
from rewards.services.errors import RewardsError
from rewards.services.wallet_service import WalletService
from rewards.api.deps import get_wallet_service
from rewards.utils.permissions import get_current_user

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.post("/request", response_model=WalletRequestResponse)
async def request_transaction(
    data: WalletRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    wallet: WalletService = Depends(get_wallet_service)
):
    """
    Создать заявку на пополнение или вывод

    Заявка ожидает решения администратора; в ответе - контакты менеджера.
    """
    try:
        result = await wallet.request_transaction(db, current_user.id, data.type, data.amount_usd)
    except RewardsError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return WalletRequestResponse(
        transaction=WalletTransactionResponse.model_validate(result.transaction),
        manager=ManagerContact(**result.manager)
    )


@router.get("/my", response_model=WalletHistoryResponse)
async def my_transactions(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Последние 30 заявок текущего пользователя"""
    rows = await WalletService.list_for_user(db, current_user.id)
    return WalletHistoryResponse(rows=[WalletTransactionResponse.model_validate(row) for row in rows])
