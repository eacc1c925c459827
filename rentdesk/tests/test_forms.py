"""
Unit tests for the record forms and their validation state machine.
"""

from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest

from forms.base_form import FormState
from forms.equipment_form import EquipmentForm
from forms.expense_form import ExpenseForm
from forms.rental_form import RentalForm
from models.equipment import Equipment
from models.expense import Expense
from models.rental import RentalCreate, RentalUpdate
from utils.validators import DATES_ORDER_ERROR, PHONE_ERROR


def fill_valid(form: RentalForm):
    form.select_equipment("1-2")
    form.set("start_date", "2024-06-10T09:00")
    form.set("end_date", "2024-06-12T09:00")
    form.set("customer_name", "Иван Петров")
    form.set("customer_phone", "+7 (999) 123-45-67")


class TestRentalFormSeeding:
    def test_new_form_starts_empty_with_defaults(self, equipment_list):
        form = RentalForm(equipment_list)

        assert form.state is FormState.EMPTY
        assert form.values["equipment_id"] == 0
        assert form.values["equipment_instance"] is None
        assert form.values["rental_price"] == 0
        assert form.values["needs_delivery"] is False
        assert form.values["source"] == "avito"
        assert form.equipment_key == ""

    def test_edit_form_seeds_from_record_and_truncates_timestamps(self, equipment_list, sample_rental):
        form = RentalForm(equipment_list, sample_rental)

        assert form.state is FormState.EDITING
        assert form.values["start_date"] == "2024-06-10T09:00"
        assert form.values["end_date"] == "2024-06-12T18:30"
        assert form.values["delivery_address"] == "ул. Ленина, 1"
        assert form.equipment_key == "1-2"
        assert form.is_valid


class TestRentalFormRules:
    def test_phone_is_normalized_on_change(self, equipment_list):
        form = RentalForm(equipment_list)
        form.set("customer_phone", "+7 (999) 123-45-67")

        assert form.values["customer_phone"] == "79991234567"
        assert "phone" not in form.errors

    def test_short_phone_reports_error_on_change(self, equipment_list):
        form = RentalForm(equipment_list)
        form.set("customer_phone", "12345")

        assert form.errors["phone"] == PHONE_ERROR
        assert form.state is FormState.INVALID

    def test_equal_dates_report_order_error(self, equipment_list):
        form = RentalForm(equipment_list)
        form.set("start_date", "2024-01-01T10:00")
        form.set("end_date", "2024-01-01T10:00")

        assert form.errors["dates"] == DATES_ORDER_ERROR

    def test_equipment_fields_set_as_text_are_coerced(self, equipment_list):
        form = RentalForm(equipment_list)
        form.set("equipment_id", "1")
        form.set("equipment_instance", "3")

        assert form.values["equipment_id"] == 1
        assert form.values["equipment_instance"] == 3
        assert "equipment" not in form.errors

    def test_out_of_range_instance_as_text_reports_error(self, equipment_list):
        form = RentalForm(equipment_list)
        form.set("equipment_id", "2")
        form.set("equipment_instance", "5")

        assert form.errors["equipment"] == "Номер экземпляра должен быть от 1 до 1"

    def test_fixing_a_field_clears_its_error(self, equipment_list):
        form = RentalForm(equipment_list)
        form.set("customer_phone", "123")
        form.set("customer_phone", "79991234567")

        assert "phone" not in form.errors

    def test_selecting_malformed_key_clears_selection(self, equipment_list):
        form = RentalForm(equipment_list)
        form.select_equipment("1-2")
        form.select_equipment("")

        assert form.values["equipment_id"] == 0
        assert form.values["equipment_instance"] is None
        assert "equipment" in form.errors

    def test_fully_filled_form_is_valid(self, equipment_list):
        form = RentalForm(equipment_list)
        fill_valid(form)

        assert form.is_valid
        assert form.state is FormState.VALID

    def test_unknown_field_raises(self, equipment_list):
        form = RentalForm(equipment_list)
        with pytest.raises(KeyError):
            form.set("colour", "red")


class TestRentalFormSubmit:
    @pytest.mark.asyncio
    async def test_submit_surfaces_all_errors_at_once(self, equipment_list):
        form = RentalForm(equipment_list)
        on_submit = Mock()

        result = await form.submit(on_submit)

        assert result is None
        on_submit.assert_not_called()
        assert set(form.errors) == {"equipment", "start_date", "end_date", "customer_name", "phone"}
        assert form.state is FormState.INVALID

    @pytest.mark.asyncio
    async def test_out_of_range_instance_blocks_submit(self, equipment_list):
        form = RentalForm(equipment_list)
        fill_valid(form)
        form.select_equipment("2-5")  # DJI Osmo has one instance
        on_submit = AsyncMock()

        result = await form.submit(on_submit)

        assert result is None
        on_submit.assert_not_called()
        assert form.errors["equipment"] == "Номер экземпляра должен быть от 1 до 1"

    @pytest.mark.asyncio
    async def test_valid_create_submits_payload(self, equipment_list):
        form = RentalForm(equipment_list)
        fill_valid(form)
        on_submit = AsyncMock(return_value="created")

        result = await form.submit(on_submit)

        assert result == "created"
        payload = on_submit.call_args.args[0]
        assert isinstance(payload, RentalCreate)
        assert payload.equipment_id == 1
        assert payload.equipment_instance == 2
        assert payload.customer_phone == "79991234567"
        assert payload.delivery_address is None
        assert form.state is FormState.SUBMITTED

    @pytest.mark.asyncio
    async def test_edit_submits_update_payload(self, equipment_list, sample_rental):
        form = RentalForm(equipment_list, sample_rental)
        form.set("rental_price", 2000)
        on_submit = Mock(return_value="updated")

        result = await form.submit(on_submit)

        assert result == "updated"
        payload = on_submit.call_args.args[0]
        assert isinstance(payload, RentalUpdate)
        assert payload.rental_price == 2000
        assert payload.start_date == "2024-06-10T09:00"


class TestEquipmentForm:
    def test_defaults(self):
        form = EquipmentForm()
        assert form.values == {"name": "", "quantity": 1, "description": "", "base_price": 0}

    @pytest.mark.asyncio
    async def test_blank_name_blocks_submit(self):
        form = EquipmentForm()
        form.set("name", "   ")
        on_submit = Mock()

        assert await form.submit(on_submit) is None
        on_submit.assert_not_called()
        assert form.errors["name"] == "Необходимо указать название оборудования"

    def test_zero_quantity_is_invalid(self):
        form = EquipmentForm()
        form.set("name", "GoPro")
        form.set("quantity", 0)
        assert "quantity" in form.errors

    @pytest.mark.asyncio
    async def test_edit_payload(self):
        equipment = Equipment(id=3, name="Insta360", quantity=2, base_price=50000)
        form = EquipmentForm(equipment)
        on_submit = Mock(return_value=True)

        await form.submit(on_submit)

        payload = on_submit.call_args.args[0]
        assert payload.name == "Insta360"
        assert payload.quantity == 2
        assert payload.description is None


class TestExpenseForm:
    def test_new_form_defaults_to_today(self):
        form = ExpenseForm(today=date(2024, 6, 15))
        assert form.values["date"] == "2024-06-15"
        assert form.values["amount"] == 0

    def test_edit_truncates_date_to_day(self):
        expense = Expense(id=1, description="Бензин", amount=1200, date="2024-06-01T00:00:00.000Z")
        form = ExpenseForm(expense)
        assert form.values["date"] == "2024-06-01"

    @pytest.mark.asyncio
    async def test_negative_amount_blocks_submit(self):
        form = ExpenseForm(today=date(2024, 6, 15))
        form.set("description", "Реклама")
        form.set("amount", -5)
        on_submit = Mock()

        assert await form.submit(on_submit) is None
        on_submit.assert_not_called()
        assert "amount" in form.errors

    @pytest.mark.asyncio
    async def test_empty_category_is_sent_as_none(self):
        form = ExpenseForm(today=date(2024, 6, 15))
        form.set("description", "Топливо для доставки")
        form.set("amount", 800)
        on_submit = Mock(return_value=True)

        await form.submit(on_submit)

        payload = on_submit.call_args.args[0]
        assert payload.category is None
        assert payload.date == "2024-06-15"
