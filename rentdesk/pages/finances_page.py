"""
Finances view-model: monthly summary, revenue by month and expenses.

Expense writes invalidate both the expenses list and every analytics read,
since expenses feed the financial summaries.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from context import AppContext
from forms.expense_form import ExpenseForm
from models.analytics import FinancialSummary, MonthlyRevenue
from models.expense import Expense
from utils.formatting import format_date_short, format_month, format_price

logger = logging.getLogger(__name__)


class FinancesPage:
    def __init__(self, context: AppContext, today: Optional[date] = None):
        self.context = context
        self.today = today or date.today()
        self.selected_month = ""
        self.financial_summary: Optional[FinancialSummary] = None
        self.monthly_revenue: List[MonthlyRevenue] = []
        self.expenses: List[Expense] = []

    @property
    def period(self) -> Tuple[int, int]:
        """(year, month) of the selected month, defaulting to the current one"""
        if self.selected_month:
            year, month = self.selected_month.split("-")
            return int(year), int(month)
        return self.today.year, self.today.month

    def select_month(self, value: str):
        """Select a month given as YYYY-MM"""
        year, month = value.split("-")
        if not 1 <= int(month) <= 12:
            raise ValueError(f"Invalid month: {value}")
        self.selected_month = f"{int(year)}-{int(month):02d}"

    @property
    def month_options(self) -> List[Tuple[str, str]]:
        year = self.today.year
        return [(f"{year}-{month:02d}", format_month(year, month)) for month in range(1, 13)]

    async def load(self) -> "FinancesPage":
        ctx = self.context
        year, month = self.period
        self.monthly_revenue = await ctx.queries.fetch(
            ctx.analytics.monthly_revenue_key(), ctx.analytics.get_monthly_revenue
        )
        self.financial_summary = await ctx.queries.fetch(
            ctx.analytics.financial_summary_key(year, month),
            ctx.analytics.get_financial_summary, year, month
        )
        self.expenses = await ctx.queries.fetch(ctx.expenses.key(), ctx.expenses.get_all)
        return self

    def summary_cards(self) -> List[Tuple[str, str]]:
        """Labelled, formatted figures of the selected month's summary"""
        summary = self.financial_summary or FinancialSummary()
        return [
            ("Выручка", format_price(summary.total_revenue)),
            ("Аренда", format_price(summary.rental_revenue)),
            ("Доставка", format_price(summary.delivery_revenue)),
            ("Расходы", format_price(summary.total_costs)),
            ("Чистая прибыль", format_price(summary.net_profit)),
        ]

    def revenue_rows(self) -> List[Dict]:
        return [
            {
                "month": item.month_name,
                "revenue": format_price(item.total_revenue),
                "rentals": item.rental_count,
            }
            for item in self.monthly_revenue
        ]

    def expense_rows(self) -> List[Dict]:
        return [
            {
                "id": expense.id,
                "date": format_date_short(expense.date),
                "description": expense.description,
                "category": expense.category or "",
                "amount": format_price(expense.amount),
            }
            for expense in self.expenses
        ]

    # -- expenses -----------------------------------------------------------

    def open_create(self) -> ExpenseForm:
        return ExpenseForm(today=self.today)

    def open_edit(self, expense: Expense) -> ExpenseForm:
        return ExpenseForm(expense, today=self.today)

    async def save(self, form: ExpenseForm) -> Optional[Expense]:
        ctx = self.context
        if form.is_edit:
            expense_id = form.record.id
            result = await form.submit(
                lambda payload: ctx.queries.mutate(
                    ctx.expenses.update, expense_id, payload, invalidates=ctx.expenses.invalidates
                )
            )
        else:
            result = await form.submit(
                lambda payload: ctx.queries.mutate(
                    ctx.expenses.create, payload, invalidates=ctx.expenses.invalidates
                )
            )

        if result is not None:
            logger.info(f"Saved expense {result.id}")
            await self.load()
        return result

    async def delete(self, expense_id: int):
        ctx = self.context
        await ctx.queries.mutate(ctx.expenses.delete, expense_id, invalidates=ctx.expenses.invalidates)
        await self.load()
