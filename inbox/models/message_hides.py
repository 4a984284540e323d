from sqlalchemy import Column, Integer, DateTime, ForeignKey, func
from . import Base


class MessageHide(Base):
    """Membership of user_id in a message's hidden-for set. Rows are only ever added."""
    __tablename__ = 'dm_message_hides'
    message_id = Column(Integer, ForeignKey('dm_messages.id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
