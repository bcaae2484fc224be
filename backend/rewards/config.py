"""
Конфигурация приложения
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator
from typing import List, Union, Any
import os


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


class Settings(BaseSettings):
    """Настройки приложения"""

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./rewards.db"
    )

    # API
    API_V1_PREFIX: str = "/api/v1"
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # Платформа: значения по умолчанию для строки platform_settings.
    # После первого запуска курс и минимумы меняет администратор через API.
    APP_NAME: str = "MRP Logistic"
    DEFAULT_USD_TO_POINTS: int = 10
    DEFAULT_MIN_DEPOSIT_USD: float = 5.0
    DEFAULT_MIN_WITHDRAW_USD: float = 10.0
    DEFAULT_MANAGER_TITLE: str = "تواصل مع المدير لإتمام العملية"
    DEFAULT_MANAGER_WHATSAPP: str = "+212600000000"
    DEFAULT_MANAGER_TELEGRAM: str = "@MRP_Manager"

    # Администратор, создаваемый при старте (если нет ни одного)
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@mrp.local")

    # Задачи
    RUN_TOKEN_BYTES: int = 32

    # Кошелёк: учитывать ли ожидающие заявки на вывод при проверке баланса
    WALLET_RESERVE_PENDING_WITHDRAWALS: bool = False

    @field_validator('DEFAULT_USD_TO_POINTS', 'RUN_TOKEN_BYTES')
    @classmethod
    def validate_positive_int(cls, v):
        """Курс и длина токена должны быть положительными"""
        if v < 1:
            raise ValueError("value must be >= 1")
        return v

    # CORS - используем model_validator для перехвата до парсинга
    CORS_ORIGINS: Union[str, List[str]] = []

    @model_validator(mode='before')
    @classmethod
    def parse_cors_origins_before(cls, data: Any) -> Any:
        """Парсинг CORS_ORIGINS из строки с запятыми до парсинга Pydantic"""
        if isinstance(data, dict):
            if 'CORS_ORIGINS' in data and isinstance(data['CORS_ORIGINS'], str):
                cors_str = data['CORS_ORIGINS'].strip()
                if cors_str:
                    data['CORS_ORIGINS'] = [origin.strip() for origin in cors_str.split(",") if origin.strip()]
                else:
                    data['CORS_ORIGINS'] = list(DEFAULT_CORS_ORIGINS)
            elif 'CORS_ORIGINS' not in data:
                data['CORS_ORIGINS'] = list(DEFAULT_CORS_ORIGINS)
        return data

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
