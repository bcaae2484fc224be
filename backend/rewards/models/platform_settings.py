"""
Модель настроек платформы (курс, минимумы, контакты менеджера)
"""
from sqlalchemy import Column, String, Integer, Float, DateTime, CheckConstraint
from sqlalchemy.sql import func

from rewards.database import Base


SETTINGS_ROW_ID = 1


class PlatformSettings(Base):
    """Единственная строка настроек, общая для всех операций кошелька"""
    __tablename__ = "platform_settings"

    id = Column(Integer, primary_key=True, default=SETTINGS_ROW_ID)
    app_name = Column(String, nullable=False)
    usd_to_points = Column(Integer, nullable=False)
    min_deposit_usd = Column(Float, nullable=False)
    min_withdraw_usd = Column(Float, nullable=False)
    manager_title = Column(String, nullable=True)
    manager_whatsapp = Column(String, nullable=True)
    manager_telegram = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("usd_to_points > 0", name="platform_settings_rate_check"),
        CheckConstraint("min_deposit_usd > 0", name="platform_settings_min_deposit_check"),
        CheckConstraint("min_withdraw_usd > 0", name="platform_settings_min_withdraw_check"),
    )

    @property
    def manager_contact(self) -> dict:
        return {
            "title": self.manager_title,
            "whatsapp": self.manager_whatsapp,
            "telegram": self.manager_telegram,
        }

    def __repr__(self):
        return f"<PlatformSettings rate={self.usd_to_points}>"
