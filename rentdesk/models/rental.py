from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from utils.validators import (
    CUSTOMER_NAME_ERROR,
    END_DATE_ERROR,
    EQUIPMENT_REQUIRED_ERROR,
    START_DATE_ERROR,
    validate_dates,
    validate_phone,
    validate_required,
)

RentalSource = Literal["avito", "website", "referral", "maps"]
RentalStatus = Literal["pending", "active", "completed", "overdue"]

RENTAL_SOURCES = ("avito", "website", "referral", "maps")
RENTAL_STATUSES = ("pending", "active", "completed", "overdue")


class RentalBase(BaseModel):
    """Rental fields as the backend exchanges them.

    Dates are ISO-8601 strings; the rental form sends them at minute
    precision (``YYYY-MM-DDTHH:MM``).
    """

    # Equipment
    equipment_id: int
    equipment_instance: Optional[int] = Field(
        None,
        ge=1,
        description="Instance number within 1..equipment.quantity"
    )

    # Period
    start_date: str
    end_date: str

    # Customer
    customer_name: str
    customer_phone: str

    # Delivery
    needs_delivery: bool = False
    delivery_address: Optional[str] = None

    # Money
    rental_price: float = 0
    delivery_price: float = 0
    delivery_costs: float = 0

    source: RentalSource = "avito"
    comment: Optional[str] = None


class RentalCreate(RentalBase):
    """Payload for creating a rental.

    Enforces the same rules as the rental form, so a payload built by hand
    cannot reach the backend with a broken period or phone.
    """

    equipment_id: int = Field(..., ge=1)

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_period_ends(cls, v: str, info: ValidationInfo) -> str:
        message = START_DATE_ERROR if info.field_name == "start_date" else END_DATE_ERROR
        if validate_required(v, message):
            raise ValueError(message)
        return v

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, v: str) -> str:
        if validate_required(v, CUSTOMER_NAME_ERROR):
            raise ValueError(CUSTOMER_NAME_ERROR)
        return v.strip()

    @field_validator("customer_phone")
    @classmethod
    def validate_customer_phone(cls, v: str) -> str:
        error = validate_phone(v)
        if error:
            raise ValueError(error)
        return v

    @model_validator(mode='after')
    def validate_period(self):
        """End must be strictly after start."""
        error = validate_dates(self.start_date, self.end_date)
        if error:
            raise ValueError(error)
        return self


class RentalUpdate(BaseModel):
    """Partial rental update. Only fields that are set get sent."""

    equipment_id: Optional[int] = Field(None, ge=1)
    equipment_instance: Optional[int] = Field(None, ge=1)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    needs_delivery: Optional[bool] = None
    delivery_address: Optional[str] = None
    rental_price: Optional[float] = None
    delivery_price: Optional[float] = None
    delivery_costs: Optional[float] = None
    source: Optional[RentalSource] = None
    comment: Optional[str] = None
    status: Optional[RentalStatus] = None

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and validate_required(v, CUSTOMER_NAME_ERROR):
            raise ValueError(CUSTOMER_NAME_ERROR)
        return v.strip() if v is not None else v

    @field_validator("customer_phone")
    @classmethod
    def validate_customer_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            error = validate_phone(v)
            if error:
                raise ValueError(error)
        return v

    @model_validator(mode='after')
    def validate_consistency(self):
        """Check the period when both ends are sent; an instance needs its equipment."""
        if self.start_date is not None and self.end_date is not None:
            error = validate_dates(self.start_date, self.end_date)
            if error:
                raise ValueError(error)

        if self.equipment_instance is not None and self.equipment_id is None:
            raise ValueError(EQUIPMENT_REQUIRED_ERROR)
        return self


class Rental(RentalBase):
    # Primary Identifier
    id: int

    status: RentalStatus = "pending"

    # Joined by the backend for list views
    equipment_name: Optional[str] = None

    # Metadata
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
