from typing import Optional

from pydantic import BaseModel, Field


class EquipmentCreate(BaseModel):
    """Writable fields of an equipment item."""

    name: str
    quantity: int = Field(
        1,
        ge=1,
        description="Number of interchangeable physical instances owned",
        examples=[3]
    )
    description: Optional[str] = None
    base_price: float = Field(
        0,
        ge=0,
        description="Purchase price of one instance",
        examples=[45000.0]
    )


class Equipment(EquipmentCreate):
    # Primary Identifier
    id: int

    # Metadata
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
