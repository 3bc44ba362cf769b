import datetime
from uuid import UUID
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Security
from sqlalchemy.orm import Session

from onestep.auth.service import get_current_user_id
from onestep.core.database import get_db
from onestep.execution.db import get_user_executions
from onestep.execution.schemas import ExecutionRecordResponse

router = APIRouter(prefix="/executions", tags=["Executions"])
logger = logging.getLogger(__name__)


@router.get(
    "",
    response_model=List[ExecutionRecordResponse],
    summary="Get execution history",
    description="List the user's daily execution records, newest first, optionally filtered by action and date range.",
    responses={
        200: {"description": "History retrieved successfully."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to retrieve history."},
    },
)
def read_executions_route(
    action_id: Optional[UUID] = None,
    date_from: Optional[datetime.date] = Query(None),
    date_to: Optional[datetime.date] = Query(None),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: UUID = Security(get_current_user_id),
) -> List[ExecutionRecordResponse]:
    try:
        return get_user_executions(db, user_id, action_id, date_from, date_to, skip, limit)
    except Exception as e:
        logger.error(f"Failed to fetch executions for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve execution history")
