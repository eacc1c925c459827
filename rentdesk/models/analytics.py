"""Read-only aggregates computed by the backend and displayed as-is."""

from pydantic import BaseModel


class FinancialSummary(BaseModel):
    # Revenue
    total_revenue: float = 0
    rental_revenue: float = 0
    delivery_revenue: float = 0

    # Costs
    total_costs: float = 0
    delivery_costs: float = 0
    operational_expenses: float = 0

    net_profit: float = 0
    total_rentals: int = 0


class MonthlyRevenue(BaseModel):
    year: int
    month: int
    month_name: str
    total_revenue: float = 0
    rental_count: int = 0


class EquipmentUtilization(BaseModel):
    id: int
    name: str
    quantity: int
    total_rentals: int = 0
    total_revenue: float = 0
