"""Ingest endpoints for users, income/expense events and financial profiles."""

import logging
import re
from datetime import date
from typing import Optional, Dict, Any

from fastapi import APIRouter, Depends, HTTPException, status as http_status
from pydantic import BaseModel, Field, validator
from sqlalchemy.ext.asyncio import AsyncSession

from app.analysis.constants import EXPENSE_CATEGORIES
from app.db.database import get_db
from app.db.repositories import FinanceRepository, TRANSACTION_TYPES
from app.db.schemas import FinancialProfileUpdate

logger = logging.getLogger(__name__)
router = APIRouter()

MAX_AMOUNT = 1_000_000_000
UNSAFE_TEXT_CHARS = re.compile(r"[<>&\"']")


def sanitize_text(text: Optional[str]) -> Optional[str]:
    """Strip markup-sensitive characters and cap the length."""
    if not text:
        return None
    return UNSAFE_TEXT_CHARS.sub("", str(text)).strip()[:200] or None


def get_repository(db: AsyncSession = Depends(get_db)) -> FinanceRepository:
    return FinanceRepository(db)


async def require_user(repository: FinanceRepository, user_id: int):
    user = await repository.get_user(user_id)
    if not user:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found"
        )
    return user


class UserCreateRequest(BaseModel):
    """Request model for user registration."""
    telegram_id: str = Field(..., min_length=1, max_length=64)
    username: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = Field(default=None, max_length=255)


class UserDto(BaseModel):
    id: int
    telegram_id: str
    username: Optional[str] = None
    first_name: Optional[str] = None


class TransactionCreateRequest(BaseModel):
    """Request model for a user-reported income or expense."""
    user_id: int = Field(..., ge=1)
    type: str = Field(..., description="'income' or 'expense'")
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    category: Optional[str] = Field(
        default=None,
        description="Budget category for expenses: necesidad, gusto or ahorro"
    )
    description: Optional[str] = None
    transaction_date: Optional[date] = None

    @validator('type')
    def validate_type(cls, v):
        normalized = v.strip().lower()
        if normalized not in TRANSACTION_TYPES:
            raise ValueError(f"type must be one of: {', '.join(TRANSACTION_TYPES)}")
        return normalized

    @validator('category')
    def validate_category(cls, v):
        if v is None:
            return v
        normalized = v.strip().lower()
        if normalized not in EXPENSE_CATEGORIES:
            raise ValueError(f"category must be one of: {', '.join(EXPENSE_CATEGORIES)}")
        return normalized


class TransactionDto(BaseModel):
    id: int
    user_id: int
    type: str
    amount: float
    category: Optional[str] = None
    description: Optional[str] = None
    transaction_date: date


@router.post(
    "/users",
    response_model=UserDto,
    summary="Register a user",
    description="Creates a user for a chat identity, or returns the existing one"
)
async def register_user(
    request: UserCreateRequest,
    repository: FinanceRepository = Depends(get_repository),
):
    user = await repository.create_user(
        request.telegram_id,
        username=sanitize_text(request.username),
        first_name=sanitize_text(request.first_name),
    )
    return UserDto(
        id=user.id,
        telegram_id=user.telegram_id,
        username=user.username,
        first_name=user.first_name,
    )


@router.post(
    "/transactions",
    response_model=TransactionDto,
    status_code=http_status.HTTP_201_CREATED,
    summary="Record an income or expense",
)
async def record_transaction(
    request: TransactionCreateRequest,
    repository: FinanceRepository = Depends(get_repository),
):
    if request.type == "expense" and not request.category:
        raise HTTPException(
            status_code=http_status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Expenses require a category: {', '.join(EXPENSE_CATEGORIES)}"
        )

    await require_user(repository, request.user_id)

    transaction = await repository.create_transaction(
        user_id=request.user_id,
        type=request.type,
        amount=request.amount,
        category=request.category if request.type == "expense" else None,
        description=sanitize_text(request.description),
        on_date=request.transaction_date,
    )
    logger.info(
        f"Recorded {transaction.type} of {transaction.amount:.2f} for user {request.user_id} "
        f"on {transaction.date.isoformat()}"
    )
    return TransactionDto(
        id=transaction.id,
        user_id=transaction.user_id,
        type=transaction.type,
        amount=transaction.amount,
        category=transaction.category,
        description=transaction.description,
        transaction_date=transaction.date,
    )


@router.get(
    "/profiles/{user_id}",
    response_model=Dict[str, Any],
    summary="Read a financial profile",
)
async def read_profile(
    user_id: int,
    repository: FinanceRepository = Depends(get_repository),
):
    profile = await repository.get_financial_profile(user_id)
    if profile is None:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=f"No financial profile for user {user_id}"
        )
    return profile


@router.put(
    "/profiles/{user_id}",
    response_model=Dict[str, Any],
    summary="Update a financial profile",
    description="Writes only the fields present in the request body"
)
async def update_profile(
    user_id: int,
    update: FinancialProfileUpdate,
    repository: FinanceRepository = Depends(get_repository),
):
    await require_user(repository, user_id)
    profile = await repository.upsert_financial_profile(user_id, update)
    logger.info(f"Updated profile for user {user_id}: {sorted(update.changes())}")
    return profile
