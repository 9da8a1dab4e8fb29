"""
db/models/client.py

Client model: one seller account managed by an organization (agency).
All report data is scoped to a client.
"""

import uuid

from sqlalchemy import Boolean, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class Client(Base, TimestampMixin):
    """
    A seller account whose reports are ingested.

    organization_id scopes access: callers may only touch clients of their
    own organization.
    """

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        comment="Owning organization (tenant)",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    marketplace_id: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        comment="Primary Amazon marketplace, e.g. ATVPDKIKX0DER",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Soft-disable a client without deletion",
    )

    __table_args__ = (
        Index("ix_clients_organization_id", "organization_id"),
        Index("ix_clients_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Client id={self.id} name={self.name!r} organization_id={self.organization_id}>"
