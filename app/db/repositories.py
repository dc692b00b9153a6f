"""Store access for users, transactions and financial profiles."""

import logging
from collections import defaultdict
from datetime import date
from typing import List, Optional, Dict, Any, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.analysis.months import month_bounds, shift_year_month, format_year_month
from app.db.models import User, Transaction, FinancialProfile
from app.db.schemas import FinancialProfileUpdate, BehavioralSnapshot

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ("income", "expense")


def profile_to_dict(profile: FinancialProfile) -> Dict[str, Any]:
    return {
        column.name: getattr(profile, column.name)
        for column in FinancialProfile.__table__.columns
    }


class FinanceRepository:
    """
    Async store used by the behavioral report service and the ingest API.

    Every read raises on database failure; callers decide whether that is
    fatal.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    # ── Users ────────────────────────────────────────────────────────────────

    async def get_user(self, user_id: int) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_telegram_id(self, telegram_id: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.telegram_id == str(telegram_id))
        )
        return result.scalar_one_or_none()

    async def create_user(
        self,
        telegram_id: str,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
    ) -> User:
        """Register a user, returning the existing row when already known."""
        existing = await self.get_user_by_telegram_id(telegram_id)
        if existing:
            return existing

        user = User(telegram_id=str(telegram_id), username=username, first_name=first_name)
        self.session.add(user)
        await self.session.flush()
        logger.info(f"Registered user {user.id} (telegram_id={telegram_id})")
        return user

    # ── Transactions ─────────────────────────────────────────────────────────

    async def create_transaction(
        self,
        user_id: int,
        type: str,
        amount: float,
        category: Optional[str] = None,
        description: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> Transaction:
        if type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {type}")

        transaction = Transaction(
            user_id=user_id,
            type=type,
            amount=float(amount),
            category=category,
            description=description,
            date=on_date or date.today(),
        )
        self.session.add(transaction)
        await self.session.flush()
        return transaction

    async def get_total_by_type(self, user_id: int, type: str, year: int, month: int) -> float:
        start, end = month_bounds(format_year_month(year, month))
        result = await self.session.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0))
            .where(Transaction.user_id == user_id)
            .where(Transaction.type == type)
            .where(Transaction.date >= start)
            .where(Transaction.date < end)
        )
        total = result.scalar()
        return float(total or 0)

    async def get_monthly_category_totals(
        self,
        user_id: int,
        months_back: int,
        current_month: str,
    ) -> List[Dict[str, Any]]:
        """
        Expense totals grouped by (month, category).

        Covers the ``months_back`` calendar months ending with
        ``current_month``. Rows are ordered by month, then category.
        """
        window_start, _ = month_bounds(shift_year_month(current_month, -(months_back - 1)))
        _, window_end = month_bounds(current_month)

        result = await self.session.execute(
            select(Transaction.date, Transaction.category, Transaction.amount)
            .where(Transaction.user_id == user_id)
            .where(Transaction.type == "expense")
            .where(Transaction.date >= window_start)
            .where(Transaction.date < window_end)
        )

        totals = defaultdict(float)
        counts = defaultdict(int)
        for tx_date, category, amount in result.all():
            key = (format_year_month(tx_date.year, tx_date.month), category or "sin_categoria")
            totals[key] += float(amount)
            counts[key] += 1

        return [
            {"month": month, "category": category, "total": totals[(month, category)], "count": counts[(month, category)]}
            for month, category in sorted(totals)
        ]

    # ── Financial profiles ───────────────────────────────────────────────────

    async def _get_profile_row(self, user_id: int) -> Optional[FinancialProfile]:
        result = await self.session.execute(
            select(FinancialProfile).where(FinancialProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_financial_profile(self, user_id: int) -> Optional[Dict[str, Any]]:
        profile = await self._get_profile_row(user_id)
        return profile_to_dict(profile) if profile else None

    async def upsert_financial_profile(
        self,
        user_id: int,
        update: Union[FinancialProfileUpdate, BehavioralSnapshot],
    ) -> Dict[str, Any]:
        """Write only the fields set on ``update``, creating the row if needed."""
        changes = update.changes()
        profile = await self._get_profile_row(user_id)

        if profile is None:
            profile = FinancialProfile(user_id=user_id, **changes)
            self.session.add(profile)
        else:
            for field, value in changes.items():
                setattr(profile, field, value)

        await self.session.flush()
        await self.session.refresh(profile)
        return profile_to_dict(profile)

    async def save_behavioral_snapshot(self, user_id: int, snapshot: BehavioralSnapshot) -> None:
        """Persist the derived behavioral fields in their own commit."""
        try:
            await self.upsert_financial_profile(user_id, snapshot)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
