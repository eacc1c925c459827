from typing import Optional

from pydantic import BaseModel, Field


class ExpenseCreate(BaseModel):
    description: str
    amount: float = Field(0, ge=0)
    date: str  # YYYY-MM-DD
    category: Optional[str] = None


class Expense(ExpenseCreate):
    # Primary Identifier
    id: int

    # Metadata
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
