from typing import List, Union

from api_client import BaseResource
from models.rental import Rental, RentalCreate, RentalUpdate


class RentalResource(BaseResource):
    """Typed wrapper over the /rentals collection"""

    resource = "rentals"
    path = "/rentals"

    def get_all(self) -> List[Rental]:
        """Get all rentals, newest first as the backend orders them"""
        return [Rental.model_validate(item) for item in self.client.get(self.path) or []]

    def get(self, rental_id: int) -> Rental:
        return Rental.model_validate(self.client.get(self.item_path(rental_id)))

    def create(self, rental: RentalCreate) -> Rental:
        data = self.client.post(self.path, json=rental.model_dump(exclude_none=True))
        return Rental.model_validate(data)

    def update(self, rental_id: int, updates: Union[RentalUpdate, dict]) -> Rental:
        """Update a rental; only the fields that are set get sent"""
        if isinstance(updates, dict):
            updates = RentalUpdate.model_validate(updates)
        data = self.client.put(self.item_path(rental_id), json=updates.model_dump(exclude_unset=True))
        return Rental.model_validate(data)

    def complete(self, rental_id: int) -> Rental:
        """Mark a rental as completed"""
        return self.update(rental_id, RentalUpdate(status="completed"))

    def delete(self, rental_id: int):
        self.client.delete(self.item_path(rental_id))
