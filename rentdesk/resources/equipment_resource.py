from typing import List, Union

from api_client import BaseResource
from models.equipment import Equipment, EquipmentCreate


class EquipmentResource(BaseResource):
    """Typed wrapper over the /equipment collection"""

    resource = "equipment"
    path = "/equipment"

    def get_all(self) -> List[Equipment]:
        return [Equipment.model_validate(item) for item in self.client.get(self.path) or []]

    def get(self, equipment_id: int) -> Equipment:
        return Equipment.model_validate(self.client.get(self.item_path(equipment_id)))

    def create(self, equipment: EquipmentCreate) -> Equipment:
        data = self.client.post(self.path, json=equipment.model_dump(exclude_none=True))
        return Equipment.model_validate(data)

    def update(self, equipment_id: int, updates: Union[EquipmentCreate, dict]) -> Equipment:
        if isinstance(updates, EquipmentCreate):
            updates = updates.model_dump(exclude_none=True)
        data = self.client.put(self.item_path(equipment_id), json=updates)
        return Equipment.model_validate(data)

    def delete(self, equipment_id: int):
        self.client.delete(self.item_path(equipment_id))
