"""
Field-level validation rules shared by the record forms.

Each rule is a pure function returning an error message, or None when the
value passes. Messages are shown inline next to the offending field.
"""

import re
from typing import Iterable, Optional, Tuple

from models.equipment import Equipment
from utils.formatting import parse_timestamp

PHONE_LENGTH = 11

PHONE_ERROR = "Номер телефона должен содержать 11 цифр"
DATES_ORDER_ERROR = "Дата окончания должна быть позже даты начала"
DATES_FORMAT_ERROR = "Некорректный формат даты"
EQUIPMENT_REQUIRED_ERROR = "Необходимо выбрать оборудование"
EQUIPMENT_UNKNOWN_ERROR = "Выбранное оборудование не найдено"
START_DATE_ERROR = "Необходимо указать дату начала"
END_DATE_ERROR = "Необходимо указать дату окончания"
CUSTOMER_NAME_ERROR = "Необходимо указать ФИО арендатора"


def normalize_phone(value: Optional[str]) -> str:
    """
    Keep only digits, at most eleven of them.

    Handles:
    - "+7 (999) 123-45-67" -> "79991234567"
    - "8-999-123-45-67-00" -> "89991234567"
    - None, "" -> ""
    """
    if not value:
        return ""
    return re.sub(r"\D", "", value)[:PHONE_LENGTH]


def validate_phone(phone: str) -> Optional[str]:
    """Check a stored, already normalized phone number."""
    if not re.fullmatch(r"\d{%d}" % PHONE_LENGTH, phone or ""):
        return PHONE_ERROR
    return None


def validate_dates(start_date: str, end_date: str) -> Optional[str]:
    """
    Check that the rental ends strictly after it starts.

    Missing values are not reported here; the required-field rules own that.
    Equal timestamps are an error.
    """
    if not start_date or not end_date:
        return None

    try:
        start = parse_timestamp(start_date)
        end = parse_timestamp(end_date)
    except ValueError:
        return DATES_FORMAT_ERROR

    if end <= start:
        return DATES_ORDER_ERROR
    return None


def validate_required(value: Optional[str], message: str) -> Optional[str]:
    if value is None or not str(value).strip():
        return message
    return None


def parse_int(value) -> Optional[int]:
    """
    Coerce a form value to an int.

    Handles:
    - 3, "3", " 3 " -> 3
    - "", "abc", None -> None
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def make_equipment_key(equipment_id: int, instance: int) -> str:
    return f"{equipment_id}-{instance}"


def parse_equipment_key(key: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Split a composite equipment choice into (equipment_id, instance).

    Handles:
    - "12-3" -> (12, 3)
    - "", "12", "a-b", None -> None
    """
    if not key or "-" not in key:
        return None

    equipment_id, _, instance = key.partition("-")
    try:
        return int(equipment_id), int(instance)
    except ValueError:
        return None


def equipment_options(equipment: Iterable[Equipment]) -> list:
    """List every instance of every equipment item as (key, label) choices."""
    options = []
    for item in equipment:
        for number in range(1, item.quantity + 1):
            options.append((make_equipment_key(item.id, number), f"{item.name} #{number}"))
    return options


def validate_equipment_selection(
    equipment_id: Optional[int],
    instance: Optional[int],
    equipment: Iterable[Equipment]
) -> Optional[str]:
    """
    Check that a concrete instance of a known equipment item is selected.

    The instance number must lie within 1..quantity of that item.
    """
    if not equipment_id or not instance:
        return EQUIPMENT_REQUIRED_ERROR

    selected = next((item for item in equipment if item.id == equipment_id), None)
    if selected is None:
        return EQUIPMENT_UNKNOWN_ERROR

    if not 1 <= instance <= selected.quantity:
        return f"Номер экземпляра должен быть от 1 до {selected.quantity}"
    return None
