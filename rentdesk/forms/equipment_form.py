from typing import Any, Dict, Optional

from models.equipment import Equipment, EquipmentCreate
from forms.base_form import BaseForm
from utils.validators import validate_required


class EquipmentForm(BaseForm):
    """Create/edit form for an equipment item"""

    rules = {
        "name": "check_name",
        "quantity": "check_quantity",
        "base_price": "check_base_price",
    }
    triggers = {
        "name": ("name",),
        "quantity": ("quantity",),
        "base_price": ("base_price",),
    }

    def __init__(self, equipment: Optional[Equipment] = None):
        super().__init__(equipment)

    def defaults(self) -> Dict[str, Any]:
        return {"name": "", "quantity": 1, "description": "", "base_price": 0}

    def seed_from(self, equipment: Equipment) -> Dict[str, Any]:
        return {
            "name": equipment.name,
            "quantity": equipment.quantity,
            "description": equipment.description or "",
            "base_price": equipment.base_price,
        }

    def check_name(self) -> Optional[str]:
        return validate_required(self.values["name"], "Необходимо указать название оборудования")

    def check_quantity(self) -> Optional[str]:
        quantity = self.values["quantity"]
        if not isinstance(quantity, int) or quantity < 1:
            return "Количество должно быть не меньше 1"
        return None

    def check_base_price(self) -> Optional[str]:
        if self.values["base_price"] is None or self.values["base_price"] < 0:
            return "Цена не может быть отрицательной"
        return None

    def payload(self) -> EquipmentCreate:
        return EquipmentCreate(
            name=self.values["name"].strip(),
            quantity=self.values["quantity"],
            description=self.values["description"] or None,
            base_price=self.values["base_price"],
        )
