from sqlalchemy import Column, Boolean, Date, Integer, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from onestep.core.database import Base
import uuid


class ExecutionRecord(Base):
    __tablename__ = "daily_executions"
    __table_args__ = (
        UniqueConstraint("action_id", "date", "user_id", name="uq_execution_action_date_user"),
        CheckConstraint("difficulty IS NULL OR (difficulty BETWEEN 1 AND 5)", name="ck_execution_difficulty"),
        CheckConstraint("energy IS NULL OR (energy BETWEEN 1 AND 5)", name="ck_execution_energy"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action_id = Column(Uuid(as_uuid=True), ForeignKey("actions.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(Uuid(as_uuid=True), index=True, nullable=False)

    date = Column(Date, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    difficulty = Column(Integer, nullable=True)
    energy = Column(Integer, nullable=True)
