"""
db/base.py

Declarative base and shared mixins for all SQLAlchemy models.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    All models must inherit from this class.
    """

    type_annotation_map: dict[type, Any] = {}


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at to any model.
    updated_at is automatically refreshed on every UPDATE via onupdate.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class ReportRowMixin(TimestampMixin):
    """
    Columns shared by every report data table.

    business_key lists the columns of the table's unique constraint, which is
    also the upsert conflict target. data_source_id points back at the upload
    session (or sync job) that last wrote the row; it is a lookup reference,
    not an owning foreign key.
    """

    business_key: ClassVar[tuple[str, ...]] = ()

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    @declared_attr
    def client_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        )

    data_source_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="manual_upload",
        server_default="manual_upload",
        comment="manual_upload | sp_api | advertising_api | keepa_api",
    )

    data_source_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
        index=True,
        comment="Upload session or sync job that produced the row",
    )
