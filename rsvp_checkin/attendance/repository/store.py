"""Attendance record store - the narrow collection interface the core relies on.

Filters are field-equality mappings (``attending=True, phone_number=...``).
For the list-valued ``meal_preferences`` field a filter means membership.
Both conditional operations (``insert_if_absent`` and ``update_one_if``) are
atomic with respect to concurrent callers. Returns DTOs, never ORM models.
"""

import contextlib
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping, Sequence
from enum import Enum
from typing import Any
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rsvp_checkin.attendance.dtos import AttendanceRecordDTO
from rsvp_checkin.attendance.errors import StoreUnavailableError
from rsvp_checkin.attendance.repository.orm_models import AttendanceRecord
from rsvp_checkin.config.database import async_session_manager

logger = logging.getLogger(__name__)

FILTERABLE_FIELDS = frozenset(
    {
        "id",
        "full_name",
        "attending",
        "phone_number",
        "meal_preferences",
        "confirmation_code",
        "attended",
    }
)
PATCHABLE_FIELDS = frozenset({"attended", "attended_at", "updated_at"})


class UniqueFieldConflict(Exception):
    """Raised by ``insert_if_absent`` when an attending record already holds the value."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"An attending record already uses this {field_name}")


def _check_fields(fields, allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unsupported attendance record fields: {sorted(unknown)}")


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class AttendanceStore(ABC):
    @abstractmethod
    async def insert_if_absent(
        self,
        record: AttendanceRecordDTO,
        unique_on: Sequence[str] = (),
    ) -> AttendanceRecordDTO:
        """Insert ``record`` unless an attending record shares a ``unique_on`` field.

        Raises:
            UniqueFieldConflict: naming the first conflicting field.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_one(self, **filters: Any) -> AttendanceRecordDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def find_all(self) -> list[AttendanceRecordDTO]:
        """All records, oldest first."""
        raise NotImplementedError

    @abstractmethod
    async def count_where(self, **filters: Any) -> int:
        raise NotImplementedError

    @abstractmethod
    async def update_one_if(
        self,
        record_id: UUID,
        condition: Mapping[str, Any],
        patch: Mapping[str, Any],
    ) -> AttendanceRecordDTO | None:
        """Apply ``patch`` to the record only if it still matches ``condition``.

        Returns the updated record, or None when nothing matched.
        """
        raise NotImplementedError


class SqlAttendanceStore(AttendanceStore):
    """SQL implementation backed by partial unique indexes and conditional UPDATEs."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession] | None = None,
        session_overwrite: AsyncSession | None = None,
    ) -> None:
        self._session_maker = session_maker
        self._session_overwrite = session_overwrite

    @contextlib.asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with async_session_manager(
                session_overwrite=self._session_overwrite,
                session_maker=self._session_maker,
            ) as session:
                yield session
        except IntegrityError:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Attendance store unavailable: {e}")
            raise StoreUnavailableError() from e

    def _where(self, filters: Mapping[str, Any]) -> list[sa.ColumnElement[bool]]:
        _check_fields(filters, FILTERABLE_FIELDS)
        clauses = []
        for name, value in filters.items():
            if name == "id":
                clauses.append(AttendanceRecord.uuid == value)
            elif name == "meal_preferences":
                # JSON array membership, portable across postgres and sqlite
                clauses.append(
                    sa.cast(AttendanceRecord.meal_preferences, sa.String).like(
                        f'%"{_plain(value)}"%'
                    )
                )
            elif value is None:
                clauses.append(getattr(AttendanceRecord, name).is_(None))
            else:
                clauses.append(getattr(AttendanceRecord, name) == _plain(value))
        return clauses

    async def _find_conflict(
        self,
        session: AsyncSession,
        record: AttendanceRecordDTO,
        unique_on: Sequence[str],
    ) -> str | None:
        if not record.attending:
            return None
        for name in unique_on:
            value = getattr(record, name)
            if value is None:
                continue
            stmt = (
                select(AttendanceRecord.uuid)
                .where(*self._where({"attending": True, name: value}))
                .limit(1)
            )
            if (await session.execute(stmt)).first() is not None:
                return name
        return None

    async def insert_if_absent(
        self,
        record: AttendanceRecordDTO,
        unique_on: Sequence[str] = (),
    ) -> AttendanceRecordDTO:
        _check_fields(unique_on, FILTERABLE_FIELDS)
        try:
            async with self._session() as session:
                conflict = await self._find_conflict(session, record, unique_on)
                if conflict is not None:
                    raise UniqueFieldConflict(conflict)

                orm_record = AttendanceRecord(
                    uuid=record.id,
                    full_name=record.full_name,
                    attending=record.attending,
                    phone_number=record.phone_number,
                    meal_preferences=[m.value for m in record.meal_preferences],
                    family_count=record.family_count,
                    family_members=list(record.family_members),
                    confirmation_code=record.confirmation_code,
                    credential=record.credential,
                    attended=record.attended,
                    attended_at=record.attended_at,
                )
                if record.created_at is not None:
                    orm_record.created_at = record.created_at
                    orm_record.updated_at = record.updated_at or record.created_at
                session.add(orm_record)
                await session.flush()
                inserted = AttendanceRecordDTO.from_orm(orm_record)
        except IntegrityError as e:
            # Lost a race against a concurrent insert; the unique index is authoritative
            async with self._session() as session:
                conflict = await self._find_conflict(session, record, unique_on)
            if conflict is None:
                raise StoreUnavailableError("Attendance store rejected the record") from e
            raise UniqueFieldConflict(conflict) from e
        return inserted

    async def find_one(self, **filters: Any) -> AttendanceRecordDTO | None:
        async with self._session() as session:
            stmt = select(AttendanceRecord).where(*self._where(filters)).limit(1)
            result = await session.execute(stmt)
            record = result.scalars().first()
            return AttendanceRecordDTO.from_orm(record) if record else None

    async def find_all(self) -> list[AttendanceRecordDTO]:
        async with self._session() as session:
            stmt = select(AttendanceRecord).order_by(AttendanceRecord.created_at)
            result = await session.execute(stmt)
            return [AttendanceRecordDTO.from_orm(r) for r in result.scalars().all()]

    async def count_where(self, **filters: Any) -> int:
        async with self._session() as session:
            stmt = select(func.count()).select_from(AttendanceRecord).where(*self._where(filters))
            return (await session.execute(stmt)).scalar_one()

    async def update_one_if(
        self,
        record_id: UUID,
        condition: Mapping[str, Any],
        patch: Mapping[str, Any],
    ) -> AttendanceRecordDTO | None:
        _check_fields(patch, PATCHABLE_FIELDS)
        async with self._session() as session:
            stmt = (
                update(AttendanceRecord)
                .where(AttendanceRecord.uuid == record_id, *self._where(condition))
                .values(**patch)
                .returning(AttendanceRecord)
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            record = result.scalars().first()
            return AttendanceRecordDTO.from_orm(record) if record else None


def get_attendance_store() -> AttendanceStore:
    """Dependency to get the attendance store instance."""
    return SqlAttendanceStore()
