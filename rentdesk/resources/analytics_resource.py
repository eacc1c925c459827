from typing import List

from api_client import BaseResource
from models.analytics import EquipmentUtilization, FinancialSummary, MonthlyRevenue


class AnalyticsResource(BaseResource):
    """Read-only aggregates under /analytics"""

    resource = "analytics"
    path = "/analytics"

    def financial_summary_key(self, year: int, month: int) -> tuple:
        return self.key("financial-summary", year, month)

    def monthly_revenue_key(self) -> tuple:
        return self.key("monthly-revenue")

    def equipment_utilization_key(self) -> tuple:
        return self.key("equipment-utilization")

    def get_financial_summary(self, year: int, month: int) -> FinancialSummary:
        data = self.client.get(f"{self.path}/financial-summary", params={"year": year, "month": month})
        return FinancialSummary.model_validate(data or {})

    def get_monthly_revenue(self) -> List[MonthlyRevenue]:
        data = self.client.get(f"{self.path}/monthly-revenue") or []
        return [MonthlyRevenue.model_validate(item) for item in data]

    def get_equipment_utilization(self) -> List[EquipmentUtilization]:
        data = self.client.get(f"{self.path}/equipment-utilization") or []
        return [EquipmentUtilization.model_validate(item) for item in data]
