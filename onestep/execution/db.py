from datetime import date
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from onestep.execution.models import ExecutionRecord

_UPSERT_BUILDERS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def upsert_execution(
    db: Session,
    action_id: UUID,
    user_id: UUID,
    day: date,
    completed: bool,
    difficulty: Optional[int] = None,
    energy: Optional[int] = None,
) -> None:
    """
    Writes the ledger row for (action_id, day, user_id), overwriting an
    existing row for the same key instead of adding a second one.

    Does not commit; the caller owns the transaction.
    """
    dialect = db.get_bind().dialect.name
    builder = _UPSERT_BUILDERS.get(dialect)
    if builder is None:
        _upsert_portable(db, action_id, user_id, day, completed, difficulty, energy)
        return

    stmt = (
        builder(ExecutionRecord)
        .values(
            id=uuid4(),
            action_id=action_id,
            user_id=user_id,
            date=day,
            completed=completed,
            difficulty=difficulty,
            energy=energy,
        )
        .on_conflict_do_update(
            index_elements=["action_id", "date", "user_id"],
            set_=dict(
                completed=completed,
                difficulty=difficulty,
                energy=energy,
            ),
        )
    )
    db.execute(stmt)


def _upsert_portable(db, action_id, user_id, day, completed, difficulty, energy) -> None:
    # Dialects without ON CONFLICT; relies on the surrounding transaction
    record = get_execution(db, action_id, user_id, day)
    if record is None:
        record = ExecutionRecord(id=uuid4(), action_id=action_id, user_id=user_id, date=day)
        db.add(record)
    record.completed = completed
    record.difficulty = difficulty
    record.energy = energy
    db.flush()


def get_execution(db: Session, action_id: UUID, user_id: UUID, day: date) -> Optional[ExecutionRecord]:
    return db.query(ExecutionRecord).filter(
        ExecutionRecord.action_id == action_id,
        ExecutionRecord.user_id == user_id,
        ExecutionRecord.date == day,
    ).first()


def has_other_completion(db: Session, user_id: UUID, day: date, action_id: UUID) -> bool:
    return db.query(ExecutionRecord.id).filter(
        ExecutionRecord.user_id == user_id,
        ExecutionRecord.date == day,
        ExecutionRecord.completed.is_(True),
        ExecutionRecord.action_id != action_id,
    ).first() is not None


def get_user_executions(
    db: Session,
    user_id: UUID,
    action_id: Optional[UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[ExecutionRecord]:
    query = db.query(ExecutionRecord).filter(ExecutionRecord.user_id == user_id)
    if action_id is not None:
        query = query.filter(ExecutionRecord.action_id == action_id)
    if date_from is not None:
        query = query.filter(ExecutionRecord.date >= date_from)
    if date_to is not None:
        query = query.filter(ExecutionRecord.date <= date_to)
    return query.order_by(ExecutionRecord.date.desc()).offset(skip).limit(limit).all()
