from typing import Any, Dict, List, Optional, Union

from models.equipment import Equipment
from models.rental import Rental, RentalCreate, RentalUpdate
from forms.base_form import BaseForm
from utils.validators import (
    CUSTOMER_NAME_ERROR,
    END_DATE_ERROR,
    START_DATE_ERROR,
    equipment_options,
    make_equipment_key,
    normalize_phone,
    parse_equipment_key,
    parse_int,
    validate_dates,
    validate_equipment_selection,
    validate_phone,
    validate_required,
)

# Precision of a datetime-local input: YYYY-MM-DDTHH:MM
DATETIME_INPUT_LENGTH = 16

RENTAL_SOURCE_OPTIONS = [
    ("avito", "Авито"),
    ("website", "Сайт"),
    ("referral", "Рекомендация"),
    ("maps", "Карты"),
]


class RentalForm(BaseForm):
    """Create/edit form for a rental.

    The equipment choice is one composite key "{equipmentId}-{instance}"
    picked among every instance of every equipment item.
    """

    rules = {
        "equipment": "check_equipment",
        "start_date": "check_start_date",
        "end_date": "check_end_date",
        "customer_name": "check_customer_name",
        "phone": "check_phone",
        "dates": "check_dates",
    }
    triggers = {
        "equipment_id": ("equipment",),
        "equipment_instance": ("equipment",),
        "start_date": ("start_date", "dates"),
        "end_date": ("end_date", "dates"),
        "customer_name": ("customer_name",),
        "customer_phone": ("phone",),
    }

    def __init__(self, equipment: List[Equipment], rental: Optional[Rental] = None):
        self.equipment = list(equipment)
        super().__init__(rental)

    def defaults(self) -> Dict[str, Any]:
        return {
            "equipment_id": 0,
            "equipment_instance": None,
            "start_date": "",
            "end_date": "",
            "customer_name": "",
            "customer_phone": "",
            "needs_delivery": False,
            "delivery_address": "",
            "rental_price": 0,
            "delivery_price": 0,
            "delivery_costs": 0,
            "source": "avito",
            "comment": "",
        }

    def seed_from(self, rental: Rental) -> Dict[str, Any]:
        return {
            "equipment_id": rental.equipment_id,
            "equipment_instance": rental.equipment_instance,
            "start_date": rental.start_date[:DATETIME_INPUT_LENGTH],
            "end_date": rental.end_date[:DATETIME_INPUT_LENGTH],
            "customer_name": rental.customer_name,
            "customer_phone": rental.customer_phone,
            "needs_delivery": rental.needs_delivery,
            "delivery_address": rental.delivery_address or "",
            "rental_price": rental.rental_price,
            "delivery_price": rental.delivery_price,
            "delivery_costs": rental.delivery_costs,
            "source": rental.source,
            "comment": rental.comment or "",
        }

    def normalize(self, field: str, value: Any) -> Any:
        if field == "customer_phone":
            return normalize_phone(value)
        if field in ("equipment_id", "equipment_instance"):
            return parse_int(value)
        return value

    # -- equipment choice ---------------------------------------------------

    @property
    def equipment_options(self) -> list:
        return equipment_options(self.equipment)

    @property
    def equipment_key(self) -> str:
        if self.values["equipment_id"] and self.values["equipment_instance"]:
            return make_equipment_key(self.values["equipment_id"], self.values["equipment_instance"])
        return ""

    def select_equipment(self, key: str):
        """Pick an equipment instance by composite key; anything else clears it."""
        selected = parse_equipment_key(key)
        equipment_id, instance = selected if selected else (0, None)
        self.values["equipment_id"] = equipment_id
        self.values["equipment_instance"] = instance
        self._touched = True
        self._submitted = False
        self._recheck(self.triggers["equipment_id"])

    # -- rules --------------------------------------------------------------

    def check_equipment(self) -> Optional[str]:
        return validate_equipment_selection(
            self.values["equipment_id"],
            self.values["equipment_instance"],
            self.equipment,
        )

    def check_start_date(self) -> Optional[str]:
        return validate_required(self.values["start_date"], START_DATE_ERROR)

    def check_end_date(self) -> Optional[str]:
        return validate_required(self.values["end_date"], END_DATE_ERROR)

    def check_customer_name(self) -> Optional[str]:
        return validate_required(self.values["customer_name"], CUSTOMER_NAME_ERROR)

    def check_phone(self) -> Optional[str]:
        return validate_phone(self.values["customer_phone"])

    def check_dates(self) -> Optional[str]:
        return validate_dates(self.values["start_date"], self.values["end_date"])

    # -- payload ------------------------------------------------------------

    def payload(self) -> Union[RentalCreate, RentalUpdate]:
        data = dict(self.values)
        data["customer_name"] = data["customer_name"].strip()
        data["delivery_address"] = data["delivery_address"] or None
        data["comment"] = data["comment"] or None
        if self.is_edit:
            return RentalUpdate(**data)
        return RentalCreate(**data)
