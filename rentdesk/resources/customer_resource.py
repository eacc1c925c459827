from typing import List

from api_client import BaseResource
from models.customer import Customer


class CustomerResource(BaseResource):
    """Read-only wrapper over /customers, which the backend derives from rentals"""

    resource = "customers"
    path = "/customers"

    def get_all(self) -> List[Customer]:
        return [Customer.model_validate(item) for item in self.client.get(self.path) or []]
