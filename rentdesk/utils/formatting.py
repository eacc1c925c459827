"""
Display formatting for dates, rental statuses and acquisition sources.

Labels are Russian, matching the locale the rental desk operates in. Every
lookup falls back to something printable for values it does not recognize.
"""

from datetime import datetime
from typing import Union

STATUS_TEXT = {
    "pending": "Ожидает",
    "active": "Активна",
    "completed": "Завершена",
    "overdue": "Просрочена",
}

STATUS_COLOR = {
    "pending": "status-pending",
    "active": "status-active",
    "completed": "status-completed",
    "overdue": "status-overdue",
}

SOURCE_TEXT = {
    "avito": "Авито",
    "website": "Сайт",
    "referral": "Рекомендация",
    "maps": "Карты",
}

MONTH_NAMES = [
    "Январь", "Февраль", "Март", "Апрель", "Май", "Июнь",
    "Июль", "Август", "Сентябрь", "Октябрь", "Ноябрь", "Декабрь",
]


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 timestamp into a naive local datetime.

    Handles:
    - "2024-12-20T15:30:00.000Z" -> converted from UTC to local time
    - "2024-12-20T15:30" -> taken as local time
    - "2024-12-20" -> midnight local time

    Args:
        value: ISO-8601 string or datetime

    Returns:
        Naive datetime in local time

    Raises:
        ValueError: If the string is not ISO-8601
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_date(date_string: str) -> str:
    """Format a timestamp as ``DD.MM.YYYY, HH:MM``."""
    return parse_timestamp(date_string).strftime("%d.%m.%Y, %H:%M")


def format_date_short(date_string: str) -> str:
    """Format a timestamp as ``DD.MM.YYYY``."""
    return parse_timestamp(date_string).strftime("%d.%m.%Y")


def format_month(year: int, month: int) -> str:
    """Format a month for selectors, e.g. ``Июнь 2024``."""
    return f"{MONTH_NAMES[month - 1]} {year}"


def format_price(amount: float) -> str:
    """Format a currency amount with grouped thousands, e.g. ``12 500 ₽``."""
    return f"{amount:,.0f}".replace(",", " ") + " ₽"


def get_status_text(status: str) -> str:
    return STATUS_TEXT.get(status, status)


def get_status_color(status: str) -> str:
    return STATUS_COLOR.get(status, "status-pending")


def get_source_text(source: str) -> str:
    return SOURCE_TEXT.get(source, source)
