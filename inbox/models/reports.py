from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from . import Base


class DMReport(Base):
    __tablename__ = 'dm_reports'
    id = Column(Integer, primary_key=True)
    reporter_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    reported_user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    conversation_id = Column(Integer, ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False)
    message_id = Column(Integer, ForeignKey('dm_messages.id', ondelete='SET NULL'), nullable=True)
    reason = Column(Text, nullable=False)
    status = Column(String(32), default='pending')  # pending, reviewed, dismissed
    created_at = Column(DateTime(timezone=True), server_default=func.now())
