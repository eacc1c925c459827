from typing import List

from context import AppContext
from models.customer import Customer
from utils.validators import normalize_phone


class CustomersPage:
    """Customer list with a name/phone search box"""

    def __init__(self, context: AppContext):
        self.context = context
        self.customers: List[Customer] = []
        self.query = ""

    async def load(self) -> "CustomersPage":
        ctx = self.context
        self.customers = await ctx.queries.fetch(ctx.customers.key(), ctx.customers.get_all)
        return self

    @property
    def visible_customers(self) -> List[Customer]:
        text = self.query.strip().lower()
        if not text:
            return self.customers

        digits = normalize_phone(text)
        return [
            customer for customer in self.customers
            if text in customer.customer_name.lower()
            or (digits and digits in customer.customer_phone)
        ]
