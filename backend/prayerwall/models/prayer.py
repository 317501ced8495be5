"""
Prayer Wall Backend — Prayer SQLAlchemy Model
===============================================

What:  ORM model representing the `prayers` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by PrayerService for list/create/delete and by Alembic.

Table layout:
    - id:        integer primary key assigned by the store (SERIAL on PostgreSQL).
                 Switch the column to BigInteger for a BIGSERIAL table; the
                 accepted id range in PrayerService follows the column type.
    - text:      the prayer itself, never empty (checked before insert)
    - name:      optional display name; NULL means anonymous
    - timestamp: insertion instant, filled in by the store's CURRENT_TIMESTAMP

    Index on timestamp DESC serves the only read pattern: newest first.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from prayerwall.database import Base


class Prayer(Base):
    """
    A prayer left on the memorial page.

    Lifecycle:
        1. Inserted by POST /api/prayers (store assigns id and timestamp)
        2. Read by any number of GET /api/prayers calls
        3. Removed for good by DELETE /api/prayers?id=...
        There is no update.
    """

    __tablename__ = "prayers"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
    )

    # Never set from Python: the store stamps the row at insert time
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )

    __table_args__ = (
        Index("idx_prayers_timestamp", timestamp.desc()),
    )

    def __repr__(self) -> str:
        return f"<Prayer(id={self.id}, name={self.name!r}, timestamp='{self.timestamp}')>"
