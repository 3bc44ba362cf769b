from uuid import UUID
from pydantic import BaseModel


class DevTokenResponse(BaseModel):
    token: str
    user_id: UUID
