from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, func
from . import Base


class DeletionMarker(Base):
    __tablename__ = 'dm_deleted_conversations'
    id = Column(Integer, primary_key=True)
    conversation_id = Column(Integer, ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('conversation_id', 'user_id', name='uix_dm_deleted_conversation_user'),
    )
