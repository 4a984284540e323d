from pydantic import BaseModel
from typing import Optional
from .users import ParticipantOut


class OpenConversationIn(BaseModel):
    other_user_id: int


class ConversationIdOut(BaseModel):
    conversation_id: int


class LastMessageOut(BaseModel):
    content: str
    sender_id: int
    creation_time: int


class ConversationOut(BaseModel):
    id: int
    creation_time: int
    last_activity_time: int
    other_user: ParticipantOut
    last_message: Optional[LastMessageOut] = None
    unread_count: int


class ConversationDetailOut(BaseModel):
    id: int
    other_user: ParticipantOut


class ClearInboxOut(BaseModel):
    deleted_count: int


class UnreadOut(BaseModel):
    has_unread: bool
