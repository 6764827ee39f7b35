"""Reusable ORM mixins and ULID identifiers."""

from datetime import datetime

import ulid
from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

ULID_LENGTH = 26


def generate_ulid() -> str:
    """Return a string ULID; used for primary keys and series ids."""
    return str(ulid.new())


def ulid_primary_key() -> Mapped[str]:
    return mapped_column(String(ULID_LENGTH), primary_key=True, default=generate_ulid)


def ulid_reference() -> Mapped[str | None]:
    """Nullable ULID column that is not a foreign key."""
    return mapped_column(String(ULID_LENGTH))


class TimestampMixin:
    """Track creation/update times in UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class PractitionerOwnedMixin:
    """Rows that belong to exactly one practitioner's calendar."""

    @declared_attr
    def practitioner_id(cls) -> Mapped[str]:
        return mapped_column(
            String(ULID_LENGTH),
            ForeignKey("practitioners.practitioner_id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
