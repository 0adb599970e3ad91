"""Kardex movement model for the database."""

import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, event
from sqlalchemy.orm import Session

from components.core.database import Base
from components.core.errors import InvalidStateError


class MovementType(str, enum.Enum):
    """Inventory events recorded in the kardex."""
    REGISTRY = "REGISTRY"
    LOAN = "LOAN"
    RETURN = "RETURN"
    RETIRE = "RETIRE"
    REPAIR = "REPAIR"
    RE_ENTRY = "RE_ENTRY"


class KardexMovement(Base):
    """Immutable ledger entry. Insertion order is id order."""
    __tablename__ = "kardex_movements"

    id = Column(Integer, primary_key=True, index=True)
    tool_group_id = Column(Integer, ForeignKey("tool_groups.id"), nullable=False, index=True)
    tool_unit_id = Column(Integer, ForeignKey("tool_units.id"), nullable=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    movement_type = Column(Enum(MovementType, native_enum=False, length=20), nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    details = Column(String(500), nullable=True)


@event.listens_for(KardexMovement, "before_update")
def _reject_update(mapper, connection, target):
    raise InvalidStateError(f"Kardex movement {target.id} is immutable")


@event.listens_for(KardexMovement, "before_delete")
def _reject_delete(mapper, connection, target):
    raise InvalidStateError(f"Kardex movement {target.id} cannot be deleted")


@event.listens_for(Session, "do_orm_execute")
def _reject_bulk_changes(orm_execute_state):
    """
    Refuse ORM bulk UPDATE and DELETE statements on the kardex.

    Together with the flush guards above this covers every write made through
    a session. Raw SQL on a bare connection is not intercepted.
    """
    if not (orm_execute_state.is_update or orm_execute_state.is_delete):
        return
    mapper = orm_execute_state.bind_mapper
    if mapper is not None and mapper.class_ is KardexMovement:
        raise InvalidStateError("Kardex movements cannot be updated or deleted in bulk")

