"""
Источник времени и генератор токенов запусков
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
import secrets

from rewards.config import settings


def epoch_ms(moment: datetime) -> int:
    """Миллисекунды с начала эпохи (naive datetime считается UTC)"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


class Clock(ABC):
    """Часы, передаваемые в сервисы. Все проверки времени идут через один экземпляр"""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def now_ms(self) -> int:
        return epoch_ms(self.now())


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def new_run_token(nbytes: int = None) -> str:
    """Неугадываемый токен запуска задачи"""
    return secrets.token_urlsafe(nbytes or settings.RUN_TOKEN_BYTES)
