"""Test tool catalog: groups, tariffs, stock and unit status."""
import pytest

from components.catalog.models import ToolStatus
from components.catalog.repository import STATUS_MOVEMENTS
from components.core.errors import (
    InvalidStateError,
    InvalidTransitionError,
    NoAvailabilityError,
    NotFoundError,
    ValidationError,
)
from components.ledger.models import MovementType
from components.ledger.repository import LedgerRepository

ACTING_USER = "tester"


async def movement_types(session):
    return [m.movement_type for m in await LedgerRepository(session).list()]


@pytest.mark.asyncio
async def test_register_group_creates_available_units(catalog, drill, session, clock):
    assert drill.id is not None
    assert drill.created_at == clock.now
    assert drill.tariff.daily_rental_rate == 1000.0
    assert drill.tariff.daily_fine_rate == 500.0
    assert [u.status for u in drill.units] == [ToolStatus.AVAILABLE, ToolStatus.AVAILABLE]

    summary = await catalog.stock_summary(drill.id)
    assert summary.available == 2
    assert summary.total == 2
    assert await movement_types(session) == [MovementType.REGISTRY]


@pytest.mark.asyncio
async def test_registry_movement_belongs_to_system_customer(drill, session, customers):
    system_customer = await customers.find_system_customer()
    movement = (await LedgerRepository(session).list())[0]
    assert movement.customer_id == system_customer.id
    assert movement.tool_group_id == drill.id
    assert ACTING_USER in movement.details


@pytest.mark.asyncio
async def test_register_group_defaults_fine_to_house_rate(catalog):
    group = await catalog.register_group("Ladder", "Access", 60000.0, 1500.0, 1, ACTING_USER)
    assert group.tariff.daily_fine_rate == 2500.0


@pytest.mark.asyncio
async def test_register_group_without_stock_writes_no_movement(catalog, session):
    group = await catalog.register_group("Mixer", "Construction", 450000.0, 12000.0, 0, ACTING_USER)
    assert group.units == []
    assert await movement_types(session) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, category, replacement_value, stock",
    [
        ("", "Power tools", 1000.0, 1),
        ("Saw", " ", 1000.0, 1),
        ("Saw", "Power tools", None, 1),
        ("Saw", "Power tools", 1000.0, -1),
    ],
)
async def test_register_group_validation(catalog, session, name, category, replacement_value, stock):
    with pytest.raises(ValidationError):
        await catalog.register_group(name, category, replacement_value, 100.0, stock, ACTING_USER)
    assert await catalog.list_groups() == []
    assert await movement_types(session) == []


@pytest.mark.asyncio
async def test_update_replacement_value(catalog, drill):
    group_id = drill.id
    group = await catalog.update_replacement_value(group_id, 90000.0)
    assert group.replacement_value == 90000.0

    with pytest.raises(ValidationError):
        await catalog.update_replacement_value(group_id, 0)
    assert (await catalog.require_group(group_id)).replacement_value == 90000.0


@pytest.mark.asyncio
async def test_update_tariff_keeps_missing_rates(catalog, drill):
    group = await catalog.update_tariff(drill.id, daily_rental_rate=1200.0)
    assert group.tariff.daily_rental_rate == 1200.0
    assert group.tariff.daily_fine_rate == 500.0


@pytest.mark.asyncio
async def test_require_group_unknown(catalog):
    with pytest.raises(NotFoundError):
        await catalog.require_group(42)


@pytest.mark.asyncio
async def test_adjust_stock_up_and_down(catalog, drill, session):
    group_id = drill.id
    await catalog.adjust_stock(group_id, 3, ACTING_USER)
    summary = await catalog.stock_summary(group_id)
    assert summary.available == 5

    await catalog.adjust_stock(group_id, -2, ACTING_USER)
    summary = await catalog.stock_summary(group_id)
    assert summary.available == 3
    assert summary.retired == 2
    assert summary.total == 5

    assert await movement_types(session) == [
        MovementType.REGISTRY,
        MovementType.REGISTRY,
        MovementType.RETIRE,
    ]


@pytest.mark.asyncio
async def test_adjust_stock_cannot_remove_more_than_available(catalog, drill, session):
    group_id = drill.id
    with pytest.raises(ValidationError):
        await catalog.adjust_stock(group_id, -3, ACTING_USER)

    summary = await catalog.stock_summary(group_id)
    assert summary.available == 2
    assert summary.retired == 0
    assert await movement_types(session) == [MovementType.REGISTRY]


@pytest.mark.asyncio
async def test_unit_repair_cycle(catalog, drill, session):
    unit_id = drill.units[0].id

    unit = await catalog.change_unit_status(unit_id, ToolStatus.IN_REPAIR, ACTING_USER)
    assert unit.status == ToolStatus.IN_REPAIR

    unit = await catalog.change_unit_status(unit_id, ToolStatus.AVAILABLE, ACTING_USER)
    assert unit.status == ToolStatus.AVAILABLE

    assert await movement_types(session) == [
        MovementType.REGISTRY,
        MovementType.REPAIR,
        MovementType.RE_ENTRY,
    ]


@pytest.mark.asyncio
async def test_retired_unit_is_terminal(catalog, drill, session):
    unit_id = drill.units[0].id
    await catalog.change_unit_status(unit_id, ToolStatus.RETIRED, ACTING_USER)

    for status in (ToolStatus.AVAILABLE, ToolStatus.IN_REPAIR, ToolStatus.RETIRED):
        with pytest.raises(InvalidTransitionError):
            await catalog.change_unit_status(unit_id, status, ACTING_USER)

    assert (await catalog.require_unit(unit_id)).status == ToolStatus.RETIRED
    assert await movement_types(session) == [MovementType.REGISTRY, MovementType.RETIRE]


@pytest.mark.asyncio
async def test_same_status_is_rejected(catalog, drill, session):
    with pytest.raises(InvalidTransitionError):
        await catalog.change_unit_status(drill.units[0].id, ToolStatus.AVAILABLE, ACTING_USER)
    assert await movement_types(session) == [MovementType.REGISTRY]


@pytest.mark.asyncio
async def test_loaned_status_only_through_loans(catalog, drill):
    group_id = drill.id
    unit_id = drill.units[0].id
    with pytest.raises(InvalidTransitionError):
        await catalog.change_unit_status(unit_id, ToolStatus.LOANED, ACTING_USER)

    unit = await catalog.allocate_unit(group_id)
    with pytest.raises(InvalidTransitionError):
        await catalog.change_unit_status(unit.id, ToolStatus.IN_REPAIR, ACTING_USER)


@pytest.mark.asyncio
async def test_allocate_until_exhausted(catalog, drill):
    group_id = drill.id
    first = await catalog.allocate_unit(group_id)
    second = await catalog.allocate_unit(group_id)
    assert first.id != second.id
    assert first.status == second.status == ToolStatus.LOANED

    with pytest.raises(NoAvailabilityError):
        await catalog.allocate_unit(group_id)


@pytest.mark.asyncio
async def test_allocate_skips_units_in_repair(catalog, drill):
    group_id = drill.id
    repaired_id = drill.units[0].id
    await catalog.change_unit_status(repaired_id, ToolStatus.IN_REPAIR, ACTING_USER)

    unit = await catalog.allocate_unit(group_id)
    assert unit.id != repaired_id
    with pytest.raises(NoAvailabilityError):
        await catalog.allocate_unit(group_id)


@pytest.mark.asyncio
async def test_deactivate_group_keeps_loaned_units(catalog, drill, session):
    group_id = drill.id
    await catalog.adjust_stock(group_id, 1, ACTING_USER)
    loaned = await catalog.allocate_unit(group_id)
    await session.commit()
    in_repair = next(u.id for u in await catalog.list_units(group_id, ToolStatus.AVAILABLE))
    await catalog.change_unit_status(in_repair, ToolStatus.IN_REPAIR, ACTING_USER)

    retired = await catalog.deactivate_group(group_id, ACTING_USER)
    assert retired == 2

    summary = await catalog.stock_summary(group_id)
    assert summary.loaned == 1
    assert summary.retired == 2
    assert summary.available == 0
    assert (await catalog.require_unit(loaned.id)).status == ToolStatus.LOANED
    assert (await movement_types(session)).count(MovementType.RETIRE) == 1


@pytest.mark.asyncio
async def test_unit_count_is_conserved(catalog, drill):
    group_id = drill.id
    await catalog.adjust_stock(group_id, 4, ACTING_USER)
    units = await catalog.list_units(group_id)
    await catalog.change_unit_status(units[0].id, ToolStatus.IN_REPAIR, ACTING_USER)
    await catalog.change_unit_status(units[1].id, ToolStatus.RETIRED, ACTING_USER)
    await catalog.allocate_unit(group_id)
    await catalog.adjust_stock(group_id, -1, ACTING_USER)

    summary = await catalog.stock_summary(group_id)
    assert summary.total == 6
    assert summary.available + summary.loaned + summary.in_repair + summary.retired == 6
    assert (summary.available, summary.loaned, summary.in_repair, summary.retired) == (2, 1, 1, 2)


@pytest.mark.asyncio
async def test_deactivated_group_stops_lending(catalog, drill, clock):
    group_id = drill.id
    await catalog.deactivate_group(group_id, ACTING_USER)

    group = await catalog.require_group(group_id)
    assert not group.is_active
    assert group.deactivated_at == clock.now

    with pytest.raises(InvalidStateError):
        await catalog.allocate_unit(group_id)
    with pytest.raises(InvalidStateError):
        await catalog.adjust_stock(group_id, 1, ACTING_USER)
    assert (await catalog.stock_summary(group_id)).total == 2


@pytest.mark.asyncio
async def test_deactivation_time_is_kept(catalog, drill, clock):
    group_id = drill.id
    first = clock.now
    await catalog.deactivate_group(group_id, ACTING_USER)
    clock.advance(days=1)
    assert await catalog.deactivate_group(group_id, ACTING_USER) == 0
    assert (await catalog.require_group(group_id)).deactivated_at == first


def test_loaned_has_no_maintenance_movement():
    assert set(STATUS_MOVEMENTS) == {ToolStatus.IN_REPAIR, ToolStatus.RETIRED, ToolStatus.AVAILABLE}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "source, target",
    [
        (ToolStatus.AVAILABLE, ToolStatus.IN_REPAIR),
        (ToolStatus.AVAILABLE, ToolStatus.RETIRED),
        (ToolStatus.IN_REPAIR, ToolStatus.AVAILABLE),
        (ToolStatus.IN_REPAIR, ToolStatus.RETIRED),
    ],
)
async def test_maintenance_change_writes_mapped_movement(catalog, drill, session, source, target):
    unit_id = drill.units[0].id
    if source != ToolStatus.AVAILABLE:
        await catalog.change_unit_status(unit_id, source, ACTING_USER)
    await catalog.change_unit_status(unit_id, target, ACTING_USER)
    assert (await movement_types(session))[-1] == STATUS_MOVEMENTS[target]
