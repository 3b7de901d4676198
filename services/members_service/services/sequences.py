"""Atomic increment-and-read counters backing MEM/TRN identifiers."""

from libs.common.config import get_settings
from services.members_service.models import SequenceCounter
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

MEMBER_SEQUENCE = "member_id"
TRAINER_SEQUENCE = "trainer_id"

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def next_sequence(db: AsyncSession, key: str) -> int:
    """Increment counter ``key`` and return the new value in one statement.

    The row is created with value 1 on first use. Concurrent callers each get
    a distinct value because the upsert takes the row lock.
    """
    dialect = db.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Unsupported database dialect for sequences: {dialect}")

    stmt = insert(SequenceCounter).values(key=key, value=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[SequenceCounter.key],
        set_={"value": SequenceCounter.value + 1},
    ).returning(SequenceCounter.value)

    result = await db.execute(stmt)
    return result.scalar_one()


def format_sequence_id(prefix: str, value: int) -> str:
    """``MEM`` + 7 -> ``MEM007``; widths grow past 999 (``MEM1000``)."""
    return f"{prefix}{value:03d}"


async def next_member_id(db: AsyncSession) -> str:
    value = await next_sequence(db, MEMBER_SEQUENCE)
    return format_sequence_id(get_settings().MEMBER_ID_PREFIX, value)


async def next_trainer_id(db: AsyncSession) -> str:
    value = await next_sequence(db, TRAINER_SEQUENCE)
    return format_sequence_id(get_settings().TRAINER_ID_PREFIX, value)
