from typing import List, Union

from api_client import BaseResource
from models.expense import Expense, ExpenseCreate


class ExpenseResource(BaseResource):
    """Typed wrapper over the /expenses collection.

    Expenses feed the financial summaries, so writes also make every
    analytics read stale.
    """

    resource = "expenses"
    path = "/expenses"
    invalidates_also = ("analytics",)

    def get_all(self) -> List[Expense]:
        return [Expense.model_validate(item) for item in self.client.get(self.path) or []]

    def create(self, expense: ExpenseCreate) -> Expense:
        data = self.client.post(self.path, json=expense.model_dump(exclude_none=True))
        return Expense.model_validate(data)

    def update(self, expense_id: int, updates: Union[ExpenseCreate, dict]) -> Expense:
        if isinstance(updates, ExpenseCreate):
            updates = updates.model_dump(exclude_none=True)
        data = self.client.put(self.item_path(expense_id), json=updates)
        return Expense.model_validate(data)

    def delete(self, expense_id: int):
        self.client.delete(self.item_path(expense_id))
