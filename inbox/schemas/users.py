from pydantic import BaseModel
from typing import Optional


class PublicUserOut(BaseModel):
    id: int
    name: str
    username: Optional[str] = None
    image_url: Optional[str] = None


class ParticipantOut(PublicUserOut):
    inbox_enabled: bool


class InboxStateOut(BaseModel):
    inbox_enabled: bool


class ActionOkOut(BaseModel):
    ok: bool = True
    message: Optional[str] = None
