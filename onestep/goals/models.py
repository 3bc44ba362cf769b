from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from onestep.core.database import Base
from onestep.core.dates import utcnow
import uuid

GOAL_STATUSES = ("active", "paused", "completed")


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), index=True, nullable=False)

    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="active")  # active, paused, completed
    created_at = Column(DateTime, nullable=False, default=utcnow)

    phases = relationship(
        "Phase",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="Phase.order_index",
    )


class Phase(Base):
    __tablename__ = "phases"
    __table_args__ = (UniqueConstraint("goal_id", "order_index", name="uq_phase_goal_order"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(Uuid(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), index=True, nullable=False)

    order_index = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    goal = relationship("Goal", back_populates="phases")
    actions = relationship(
        "Action",
        back_populates="phase",
        cascade="all, delete-orphan",
        order_by="Action.order_index",
    )


class Action(Base):
    __tablename__ = "actions"
    __table_args__ = (UniqueConstraint("phase_id", "order_index", name="uq_action_phase_order"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    phase_id = Column(Uuid(as_uuid=True), ForeignKey("phases.id", ondelete="CASCADE"), index=True, nullable=False)

    order_index = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    definition = Column(String, nullable=False)
    estimated_time = Column(String, nullable=True)  # free text, e.g. "30 min"
    completed_at = Column(DateTime, nullable=True)  # set once by the completion transaction

    phase = relationship("Phase", back_populates="actions")
