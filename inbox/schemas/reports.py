from pydantic import BaseModel
from typing import Optional


class ReportIn(BaseModel):
    reported_user_id: int
    conversation_id: int
    message_id: Optional[int] = None
    reason: str


class ReportOut(BaseModel):
    id: int
    status: str = 'pending'


class BlockStateOut(BaseModel):
    blocked: bool
