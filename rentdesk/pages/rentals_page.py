"""
Rentals list view-model: date-filtered list plus create/edit/complete/delete.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from context import AppContext
from forms.rental_form import RentalForm
from models.equipment import Equipment
from models.rental import Rental
from utils.date_filters import DATE_FILTER_LABELS, DateFilter, filter_rentals
from utils.formatting import (
    format_date,
    format_price,
    get_source_text,
    get_status_color,
    get_status_text,
)

logger = logging.getLogger(__name__)


class RentalsPage:
    def __init__(
        self,
        context: AppContext,
        date_filter: DateFilter = DateFilter.WEEK,
        now: Optional[datetime] = None
    ):
        self.context = context
        self.date_filter = DateFilter(date_filter)
        self.now = now
        self.rentals: List[Rental] = []
        self.equipment: List[Equipment] = []

    async def load(self) -> "RentalsPage":
        ctx = self.context
        self.rentals = await ctx.queries.fetch(ctx.rentals.key(), ctx.rentals.get_all)
        self.equipment = await ctx.queries.fetch(ctx.equipment.key(), ctx.equipment.get_all)
        return self

    def set_filter(self, date_filter: DateFilter):
        self.date_filter = DateFilter(date_filter)

    @property
    def filter_options(self) -> list:
        return [(f.value, label) for f, label in DATE_FILTER_LABELS.items()]

    @property
    def filtered_rentals(self) -> List[Rental]:
        return filter_rentals(self.rentals, self.date_filter, self.now)

    @property
    def summary(self) -> str:
        return f"Найдено: {len(self.filtered_rentals)} из {len(self.rentals)}"

    def rows(self) -> List[Dict]:
        """Display rows for the filtered rentals"""
        rows = []
        for rental in self.filtered_rentals:
            equipment_name = rental.equipment_name or f"#{rental.equipment_id}"
            if rental.equipment_instance:
                equipment_name = f"{equipment_name} #{rental.equipment_instance}"
            rows.append({
                "id": rental.id,
                "equipment": equipment_name,
                "customer": rental.customer_name,
                "phone": rental.customer_phone,
                "start": format_date(rental.start_date),
                "end": format_date(rental.end_date),
                "status": get_status_text(rental.status),
                "status_class": get_status_color(rental.status),
                "source": get_source_text(rental.source),
                "price": format_price(rental.rental_price),
            })
        return rows

    # -- editing ------------------------------------------------------------

    def open_create(self) -> RentalForm:
        return RentalForm(self.equipment)

    def open_edit(self, rental: Rental) -> RentalForm:
        return RentalForm(self.equipment, rental)

    async def save(self, form: RentalForm) -> Optional[Rental]:
        """Submit the form; nothing reaches the backend while it is invalid."""
        ctx = self.context
        if form.is_edit:
            rental_id = form.record.id
            result = await form.submit(
                lambda payload: ctx.queries.mutate(
                    ctx.rentals.update, rental_id, payload, invalidates=ctx.rentals.invalidates
                )
            )
        else:
            result = await form.submit(
                lambda payload: ctx.queries.mutate(
                    ctx.rentals.create, payload, invalidates=ctx.rentals.invalidates
                )
            )

        if result is not None:
            logger.info(f"Saved rental {result.id}")
            await self.load()
        return result

    async def complete(self, rental: Rental) -> Rental:
        ctx = self.context
        result = await ctx.queries.mutate(
            ctx.rentals.complete, rental.id, invalidates=ctx.rentals.invalidates
        )
        await self.load()
        return result

    async def delete(self, rental_id: int):
        ctx = self.context
        await ctx.queries.mutate(ctx.rentals.delete, rental_id, invalidates=ctx.rentals.invalidates)
        logger.info(f"Deleted rental {rental_id}")
        await self.load()
