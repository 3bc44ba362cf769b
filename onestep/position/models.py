from sqlalchemy import Column, Integer, DateTime, Uuid
from onestep.core.database import Base
from onestep.core.dates import utcnow
import uuid


class PositionState(Base):
    __tablename__ = "position_states"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), unique=True, index=True, nullable=False)

    # Plain ids, no foreign keys: the pointer may outlive a deleted goal
    current_goal_id = Column(Uuid(as_uuid=True), nullable=True)
    current_phase_id = Column(Uuid(as_uuid=True), nullable=True)
    current_action_id = Column(Uuid(as_uuid=True), nullable=True)

    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __mapper_args__ = {"version_id_col": version}
