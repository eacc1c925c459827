from datetime import date
from typing import Any, Dict, Optional

from models.expense import Expense, ExpenseCreate
from forms.base_form import BaseForm
from utils.validators import validate_required

EXPENSE_CATEGORIES = [
    "Топливо",
    "Ремонт оборудования",
    "Реклама",
    "Аренда помещения",
    "Интернет и связь",
    "Упаковка и расходники",
    "Прочее",
]


class ExpenseForm(BaseForm):
    """Create/edit form for an operational expense"""

    rules = {
        "description": "check_description",
        "amount": "check_amount",
        "date": "check_date",
    }
    triggers = {
        "description": ("description",),
        "amount": ("amount",),
        "date": ("date",),
    }

    def __init__(self, expense: Optional[Expense] = None, today: Optional[date] = None):
        self.today = today or date.today()
        super().__init__(expense)

    def defaults(self) -> Dict[str, Any]:
        return {
            "description": "",
            "amount": 0,
            "date": self.today.isoformat(),
            "category": "",
        }

    def seed_from(self, expense: Expense) -> Dict[str, Any]:
        return {
            "description": expense.description,
            "amount": expense.amount,
            "date": expense.date.split("T")[0],
            "category": expense.category or "",
        }

    def check_description(self) -> Optional[str]:
        return validate_required(self.values["description"], "Необходимо указать описание расхода")

    def check_amount(self) -> Optional[str]:
        if self.values["amount"] is None or self.values["amount"] < 0:
            return "Сумма не может быть отрицательной"
        return None

    def check_date(self) -> Optional[str]:
        return validate_required(self.values["date"], "Необходимо указать дату")

    def payload(self) -> ExpenseCreate:
        return ExpenseCreate(
            description=self.values["description"].strip(),
            amount=self.values["amount"],
            date=self.values["date"],
            category=self.values["category"] or None,
        )
