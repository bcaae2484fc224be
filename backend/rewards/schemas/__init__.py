"""
Pydantic схемы
"""
from rewards.schemas.user import UserBase, UserCreate, UserResponse, SetPointsRequest, TasksSummary, MeResponse
from rewards.schemas.settings import ManagerContact, SettingsResponse, SettingsUpdate
from rewards.schemas.task import (
    TaskResponse, TaskCreate, TaskUpdate, TaskProgressItem, TaskListResponse,
    TaskStartResponse, TaskFinishRequest, TaskFinishResponse
)
from rewards.schemas.wallet import (
    WalletRequestCreate, WalletTransactionResponse, WalletRequestResponse, WalletHistoryResponse,
    PendingRequestItem, PendingRequestsResponse
)

__all__ = [
    "UserBase", "UserCreate", "UserResponse", "SetPointsRequest", "TasksSummary", "MeResponse",
    "ManagerContact", "SettingsResponse", "SettingsUpdate",
    "TaskResponse", "TaskCreate", "TaskUpdate", "TaskProgressItem", "TaskListResponse",
    "TaskStartResponse", "TaskFinishRequest", "TaskFinishResponse",
    "WalletRequestCreate", "WalletTransactionResponse", "WalletRequestResponse", "WalletHistoryResponse",
    "PendingRequestItem", "PendingRequestsResponse",
]
