from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, func
from . import Base


class BlockedUser(Base):
    __tablename__ = 'blocked_users'
    id = Column(Integer, primary_key=True)
    blocker_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    blocked_user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('blocker_id', 'blocked_user_id', name='uix_blocker_blocked'),
    )
