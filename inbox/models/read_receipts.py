from sqlalchemy import Column, Integer, BigInteger, ForeignKey, UniqueConstraint
from . import Base


class ReadReceipt(Base):
    __tablename__ = 'dm_reads'
    id = Column(Integer, primary_key=True)
    conversation_id = Column(Integer, ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    last_read_time = Column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint('conversation_id', 'user_id', name='uix_dm_read_conversation_user'),
    )
