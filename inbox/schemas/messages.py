from pydantic import BaseModel, Field
from typing import List, Optional
from .users import PublicUserOut


class MessageIn(BaseModel):
    content: str
    parent_message_id: Optional[int] = None


class MessageOut(BaseModel):
    id: int
    conversation_id: int
    sender_id: int
    content: str
    parent_message_id: Optional[int] = None
    creation_time: int
    sender: PublicUserOut


class ReactionIn(BaseModel):
    emoji: str = Field(..., max_length=16)


class ReactionUserOut(BaseModel):
    user_id: int
    name: str


class ReactionGroupOut(BaseModel):
    emoji: str
    count: int
    users: List[ReactionUserOut]


class ReactionIdOut(BaseModel):
    id: int
