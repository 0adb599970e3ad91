"""Test customer directory."""
import asyncio

import pytest

from components.core.errors import NotFoundError, ValidationError
from components.customer.models import CustomerStatus
from components.customer.repository import CustomerRepository


@pytest.mark.asyncio
async def test_register_customer_is_active(customers):
    customer = await customers.register("Bruno Diaz", "9.876.543-2", "+56987654321", "bruno@example.com")
    assert customer.id is not None
    assert customer.status == CustomerStatus.ACTIVE
    assert (await customers.get_by_rut("9.876.543-2")).id == customer.id


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["name", "rut", "phone", "email"])
async def test_register_requires_every_field(customers, field):
    values = {"name": "Bruno", "rut": "1-9", "phone": "123", "email": "b@example.com"}
    values[field] = "   "
    with pytest.raises(ValidationError):
        await customers.register(**values)
    assert await customers.get_all() == []


@pytest.mark.asyncio
async def test_register_rejects_duplicate_rut(customers, customer):
    with pytest.raises(ValidationError):
        await customers.register("Other", customer.rut, "555", "other@example.com")
    assert len(await customers.get_all()) == 1


@pytest.mark.asyncio
async def test_email_format_is_not_checked(customers):
    customer = await customers.register("Carla", "15.111.222-3", "555", "not-an-email")
    assert customer.email == "not-an-email"


@pytest.mark.asyncio
async def test_change_status(customers, customer):
    updated = await customers.change_status(customer.id, CustomerStatus.RESTRICTED)
    assert updated.status == CustomerStatus.RESTRICTED

    # Same status again is accepted
    updated = await customers.change_status(customer.id, CustomerStatus.RESTRICTED)
    assert updated.status == CustomerStatus.RESTRICTED

    updated = await customers.change_status(customer.id, CustomerStatus.ACTIVE)
    assert updated.status == CustomerStatus.ACTIVE


@pytest.mark.asyncio
async def test_change_status_requires_status(customers, customer):
    with pytest.raises(ValidationError):
        await customers.change_status(customer.id, None)


@pytest.mark.asyncio
async def test_change_status_unknown_customer(customers):
    with pytest.raises(NotFoundError):
        await customers.change_status(999, CustomerStatus.ACTIVE)


@pytest.mark.asyncio
async def test_system_customer_is_created_once(customers):
    first = await customers.ensure_system_customer()
    second = await customers.ensure_system_customer()
    assert first.id == second.id
    assert first.email == "system@toolrent.com"
    assert first.rut == "99999999-9"
    assert len(await customers.get_all()) == 1


@pytest.mark.asyncio
async def test_unique_rut_violation_is_a_validation_error(customers, customer, monkeypatch):
    rut = customer.rut

    async def not_found(self, rut):
        return None

    # The pre-check misses, so the unique constraint has to catch it
    monkeypatch.setattr(CustomerRepository, "get_by_rut", not_found)
    with pytest.raises(ValidationError):
        await customers.register("Other", rut, "555", "other@example.com")
    monkeypatch.undo()

    assert len(await customers.get_all()) == 1


@pytest.mark.asyncio
async def test_concurrent_registration_of_same_rut(db_manager):
    async def register(email):
        async with db_manager.get_db() as db:
            try:
                customer = await CustomerRepository(db).register("Dup", "7-7", "555", email)
                return customer.id
            except ValidationError:
                return None

    results = await asyncio.gather(register("a@example.com"), register("b@example.com"))
    assert len([r for r in results if r is not None]) == 1

    async with db_manager.get_db() as check:
        assert len(await CustomerRepository(check).get_all()) == 1
