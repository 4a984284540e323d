from sqlalchemy import Column, Integer, BigInteger, String, ForeignKey, Index
from . import Base

HOURLY_PER_RECIPIENT = 'hourly_per_recipient'
DAILY_GLOBAL = 'daily_global'


class RateLimitBucket(Base):
    __tablename__ = 'dm_rate_limits'
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    # set for hourly_per_recipient buckets only
    recipient_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=True)
    limit_type = Column(String(32), nullable=False)
    window_start = Column(BigInteger, nullable=False)
    message_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index('ix_dm_rate_limits_user_recipient_window', 'user_id', 'recipient_id', 'window_start'),
        Index('ix_dm_rate_limits_user_type_window', 'user_id', 'limit_type', 'window_start'),
    )
