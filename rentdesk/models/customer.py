from pydantic import BaseModel


class Customer(BaseModel):
    """Customer aggregated by the backend from rental records."""

    customer_name: str
    customer_phone: str
    rental_count: int = 0
