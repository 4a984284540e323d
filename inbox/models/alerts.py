from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from . import Base


class Alert(Base):
    __tablename__ = 'alerts'
    id = Column(Integer, primary_key=True)
    recipient_user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    actor_user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=True)
    type = Column(String(50), nullable=False)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
