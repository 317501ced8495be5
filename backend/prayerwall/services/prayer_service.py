"""
Prayer Wall Backend — Prayer Service (Business Logic)
=======================================================

What:  List, create and delete prayers; validation and response shaping.
How:   Each operation validates its input first, then opens exactly one
       session scope, runs one statement, and formats the rows.
Who:   Called by the /api/prayers route handlers.

Operation flow:
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌────────────┐
    │  Route   │───▶│  Validate  │───▶│  One query   │───▶│  Format    │
    │          │    │  (400)     │    │  (500 on err)│    │  response  │
    └──────────┘    └────────────┘    └──────────────┘    └────────────┘

Error translation:
    Validation failures raise ValidationError before the store is touched.
    Any failure inside the session scope (engine creation, connection,
    query) is re-raised as DatabaseError with the operation's generic
    message and the underlying error text as `details`.
"""

import logging
from typing import Callable, List, Optional

from sqlalchemy import BigInteger, SmallInteger, delete, desc, insert, select

from prayerwall.config import settings
from prayerwall.database import session_scope
from prayerwall.exceptions import (
    DatabaseError,
    NotFoundError,
    PrayerWallError,
    ValidationError,
)
from prayerwall.models.prayer import Prayer
from prayerwall.schemas.prayer import PrayerCreate, PrayerResponse
from prayerwall.services.timestamps import JUST_NOW, format_timestamp

logger = logging.getLogger(__name__)


def max_id_for(column) -> int:
    """Largest value the integer column can hold on PostgreSQL."""
    if isinstance(column.type, BigInteger):
        return 2**63 - 1
    if isinstance(column.type, SmallInteger):
        return 2**15 - 1
    return 2**31 - 1


MAX_PRAYER_ID = max_id_for(Prayer.__table__.c.id)


def _error_detail(exc: Exception) -> str:
    """Underlying error text for the `details` field of a 500 response."""
    if isinstance(exc, PrayerWallError):
        if exc.details:
            return f"{exc.message}: {exc.details}"
        return exc.message
    # SQLAlchemy wraps driver errors; the driver message is the useful part
    orig = getattr(exc, "orig", None)
    if orig is not None and str(orig):
        return str(orig)
    return str(exc) or type(exc).__name__


class PrayerService:
    """
    Business logic layer for prayer operations.

    Responsibilities:
        - list_prayers():  all prayers, newest first, display timestamps
        - create_prayer(): validate and insert one prayer
        - delete_prayer(): validate id and remove one prayer

    Args:
        session_factory: Callable returning an async context manager that
            yields an AsyncSession. Defaults to database.session_scope.
    """

    def __init__(self, session_factory: Callable = session_scope):
        self._session_factory = session_factory

    @staticmethod
    def _to_response(prayer: Prayer) -> PrayerResponse:
        return PrayerResponse(
            id=str(prayer.id),
            text=prayer.text,
            name=prayer.name or None,
            timestamp=format_timestamp(prayer.timestamp),
        )

    async def list_prayers(self, limit: Optional[int] = None) -> List[PrayerResponse]:
        """
        Return every prayer ordered by timestamp, newest first.

        Query plan:
            SELECT id, text, name, timestamp FROM prayers
            ORDER BY timestamp DESC [LIMIT :limit]

        Args:
            limit: Optional row cap; defaults to settings.list_limit (None = all)

        Raises:
            DatabaseError: "Failed to fetch prayers" (→ 500), no partial results
        """
        if limit is None:
            limit = settings.list_limit

        try:
            async with self._session_factory() as db:
                query = select(Prayer).order_by(desc(Prayer.timestamp))
                if limit:
                    query = query.limit(limit)
                result = await db.execute(query)
                prayers = list(result.scalars().all())
        except Exception as e:
            logger.error("Error fetching prayers: %s", e, exc_info=True)
            raise DatabaseError(
                message="Failed to fetch prayers",
                details=_error_detail(e),
            )

        logger.info("Found %d prayers", len(prayers))
        return [self._to_response(prayer) for prayer in prayers]

    async def create_prayer(self, payload: PrayerCreate) -> PrayerResponse:
        """
        Insert a new prayer and return it.

        The store assigns id and timestamp (INSERT ... RETURNING). The text
        is stored exactly as submitted; trimming only decides emptiness. A
        blank name is stored as NULL (anonymous).

        Returns:
            PrayerResponse with timestamp "Just now"

        Raises:
            ValidationError: text missing or whitespace-only (→ 400)
            DatabaseError: "Failed to create prayer" (→ 500)
        """
        text = payload.text
        if text is None or not text.strip():
            raise ValidationError(message="Prayer text is required", field="text")

        name = payload.name.strip() if payload.name else None
        name = name or None

        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    insert(Prayer)
                    .values(text=text, name=name)
                    .returning(Prayer.id, Prayer.text, Prayer.name, Prayer.timestamp)
                )
                row = result.one()
        except Exception as e:
            logger.error("Error creating prayer: %s", e, exc_info=True)
            raise DatabaseError(
                message="Failed to create prayer",
                details=_error_detail(e),
            )

        logger.info("Prayer saved successfully: id=%s", row.id)

        return PrayerResponse(
            id=str(row.id),
            text=row.text,
            name=row.name or None,
            timestamp=JUST_NOW,
        )

    async def delete_prayer(self, prayer_id: Optional[str]) -> None:
        """
        Remove the prayer with the given id.

        Only plain ASCII digits name a row. Anything else ("abc", "+10",
        "1_0", non-ASCII digits) or a value outside the column's range can
        never match a row, so it is reported as not found.

        Raises:
            ValidationError: id missing or blank (→ 400)
            NotFoundError: no row has that id (→ 404)
            DatabaseError: "Failed to delete prayer" (→ 500)
        """
        if prayer_id is None or not prayer_id.strip():
            raise ValidationError(message="Prayer ID is required", field="id")

        raw = prayer_id.strip()
        if not (raw.isascii() and raw.isdecimal()):
            raise NotFoundError(resource="Prayer", resource_id=prayer_id)
        pk = int(raw)
        if not 0 < pk <= MAX_PRAYER_ID:
            raise NotFoundError(resource="Prayer", resource_id=prayer_id)

        logger.info("Deleting prayer with ID %s", pk)

        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    delete(Prayer).where(Prayer.id == pk).returning(Prayer.id)
                )
                deleted_id = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Error deleting prayer %s: %s", pk, e, exc_info=True)
            raise DatabaseError(
                message="Failed to delete prayer",
                details=_error_detail(e),
            )

        if deleted_id is None:
            raise NotFoundError(resource="Prayer", resource_id=prayer_id)

        logger.info("Prayer with ID %s deleted successfully", pk)


# ── Singleton Instance ────────────────────────────────────────────────────
prayer_service = PrayerService()


def get_prayer_service() -> PrayerService:
    """FastAPI dependency; tests swap it through app.dependency_overrides."""
    return prayer_service
