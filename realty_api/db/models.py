"""SQLAlchemy ORM models for users, properties and appointments."""

import uuid
import datetime as dt
from decimal import Decimal

from sqlalchemy import (
    Boolean, Date, ForeignKey, Index, Numeric, String, Text, Uuid, func, text
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from realty_api.db.base import Base
from realty_api.db.enums import DEFAULT_APPOINTMENT_STATUS


# Partial index predicate for slots that are still occupied
ACTIVE_SLOT_PREDICATE = text("status IN ('pending', 'confirmed')")


# =============================================================================
# Collaborator Models
# =============================================================================

class User(Base):
    """
    A registered person: administrator, agent or client.

    Only the fields appointment scheduling reads are mapped here;
    account management lives elsewhere.
    """
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_role", "role"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    created_at: Mapped[dt.datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Property(Base):
    """A listed property that clients can book viewings for."""
    __tablename__ = "properties"
    __table_args__ = (
        Index("idx_properties_agent", "agent_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=text("true"), nullable=False
    )
    agent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[dt.datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )


# =============================================================================
# Appointments
# =============================================================================

class Appointment(Base):
    """
    A property viewing booked by a client.

    Lifecycle: pending → confirmed → completed, or → cancelled.
    Times are "HH:MM" strings on the property's calendar day; end_time is
    always start_time + 60 minutes and computed by the booking service.
    """
    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_property_date", "property_id", "date"),
        Index("idx_appointments_client", "client_id"),
        Index("idx_appointments_agent", "agent_id"),
        Index("idx_appointments_status", "status"),
        # Storage-level backstop against two concurrent bookings of one slot
        Index(
            "uq_appointments_active_slot",
            "property_id", "date", "start_time",
            unique=True,
            postgresql_where=ACTIVE_SLOT_PREDICATE,
            sqlite_where=ACTIVE_SLOT_PREDICATE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    agent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Scheduling
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_APPOINTMENT_STATUS.value,
        server_default=text(f"'{DEFAULT_APPOINTMENT_STATUS.value}'"),
        nullable=False,
    )

    # Free text
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    agent_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    property: Mapped["Property"] = relationship(foreign_keys=[property_id])
    client: Mapped["User"] = relationship(foreign_keys=[client_id])
    agent: Mapped["User | None"] = relationship(foreign_keys=[agent_id])
