import logging
from typing import Dict, List, Optional

from context import AppContext
from forms.equipment_form import EquipmentForm
from models.analytics import EquipmentUtilization
from models.equipment import Equipment

logger = logging.getLogger(__name__)


class EquipmentPage:
    """Inventory view-model with per-item utilization"""

    def __init__(self, context: AppContext):
        self.context = context
        self.equipment: List[Equipment] = []
        self.utilization: Dict[int, EquipmentUtilization] = {}

    async def load(self) -> "EquipmentPage":
        ctx = self.context
        self.equipment = await ctx.queries.fetch(ctx.equipment.key(), ctx.equipment.get_all)
        utilization = await ctx.queries.fetch(
            ctx.analytics.equipment_utilization_key(), ctx.analytics.get_equipment_utilization
        )
        self.utilization = {item.id: item for item in utilization}
        return self

    @property
    def total_instances(self) -> int:
        return sum(item.quantity for item in self.equipment)

    def open_create(self) -> EquipmentForm:
        return EquipmentForm()

    def open_edit(self, equipment: Equipment) -> EquipmentForm:
        return EquipmentForm(equipment)

    async def save(self, form: EquipmentForm) -> Optional[Equipment]:
        ctx = self.context
        if form.is_edit:
            equipment_id = form.record.id
            result = await form.submit(
                lambda payload: ctx.queries.mutate(
                    ctx.equipment.update, equipment_id, payload, invalidates=ctx.equipment.invalidates
                )
            )
        else:
            result = await form.submit(
                lambda payload: ctx.queries.mutate(
                    ctx.equipment.create, payload, invalidates=ctx.equipment.invalidates
                )
            )

        if result is not None:
            logger.info(f"Saved equipment {result.id}")
            await self.load()
        return result

    async def delete(self, equipment_id: int):
        ctx = self.context
        await ctx.queries.mutate(ctx.equipment.delete, equipment_id, invalidates=ctx.equipment.invalidates)
        await self.load()
