"""Database models for Quota domain."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String, Text

from ..database import Base

MONEY = Numeric(18, 6)


class UserQuotaModel(Base):
    """User quota database model."""

    __tablename__ = "user_quotas"

    user_address = Column(String(128), primary_key=True)
    monthly_cap = Column(MONEY, nullable=False)
    current_usage = Column(MONEY, nullable=False, default=0)
    last_reset_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return (
            f"<UserQuotaModel(user_address='{self.user_address}', "
            f"usage={self.current_usage}, cap={self.monthly_cap})>"
        )


class UsageLogModel(Base):
    """Usage record database model. Rows are never updated."""

    __tablename__ = "usage_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_address = Column(String(128), nullable=False)
    amount = Column(MONEY, nullable=False)
    currency = Column(String(16), nullable=False, default="USD")
    task_id = Column(String(255), nullable=True)
    tx_hash = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_usage_logs_user_address", "user_address"),
        Index("ix_usage_logs_task_id", "task_id"),
        Index("ix_usage_logs_user_timestamp", "user_address", "timestamp"),
    )

    def __repr__(self) -> str:
        return (
            f"<UsageLogModel(id={self.id}, user_address='{self.user_address}', "
            f"amount={self.amount})>"
        )
