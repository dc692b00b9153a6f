from sqlalchemy import Column, String, DateTime, Date, Float, Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.database import Base


class BaseEntity(Base):
    __abstract__ = True
    id = Column(Integer, primary_key=True, autoincrement=True)


class BaseAuditableEntity(BaseEntity):
    __abstract__ = True

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.utcnow)


class User(BaseAuditableEntity):
    __tablename__ = "users"

    telegram_id = Column(String(64), nullable=False, unique=True)
    username = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=True)

    transactions = relationship("Transaction", back_populates="user")
    financial_profile = relationship("FinancialProfile", back_populates="user", uselist=False)


class Transaction(BaseAuditableEntity):
    __tablename__ = "transactions"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(16), nullable=False)  # 'income' | 'expense'
    amount = Column(Float, nullable=False)
    category = Column(String(32), nullable=True)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)

    user = relationship("User", back_populates="transactions")


class FinancialProfile(BaseAuditableEntity):
    __tablename__ = "financial_profiles"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    # Declared during onboarding
    salary = Column(Float, nullable=True)
    payment_frequency = Column(String(16), nullable=True)
    is_student = Column(Boolean, nullable=False, default=False)
    study_cost = Column(Float, nullable=False, default=0)
    transport_cost = Column(Float, nullable=False, default=0)
    food_cost = Column(Float, nullable=False, default=0)
    leisure_cost = Column(Float, nullable=False, default=0)
    services_cost = Column(Float, nullable=False, default=0)
    has_debt = Column(Boolean, nullable=False, default=False)
    debt_total = Column(Float, nullable=False, default=0)
    debt_monthly = Column(Float, nullable=False, default=0)
    current_savings = Column(Float, nullable=False, default=0)
    is_employed = Column(Boolean, nullable=False, default=False)
    income_type = Column(String(16), nullable=False, default="fijo")
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    # Last behavioral snapshot, overwritten on every report
    category_trends = Column(Text, nullable=True)
    monthly_deviation_score = Column(Float, nullable=True)
    recurring_spike_pattern = Column(Text, nullable=True)
    behavioral_risk_level = Column(String(16), nullable=True)

    user = relationship("User", back_populates="financial_profile")
