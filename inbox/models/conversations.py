from sqlalchemy import Column, Integer, BigInteger, ForeignKey, UniqueConstraint, CheckConstraint, Index
from . import Base


class Conversation(Base):
    __tablename__ = 'dm_conversations'
    id = Column(Integer, primary_key=True)
    # canonical pair: user_low_id < user_high_id
    user_low_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    user_high_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    last_message_id = Column(Integer, nullable=True)
    last_activity_time = Column(BigInteger, nullable=False)
    creation_time = Column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_low_id', 'user_high_id', name='uix_dm_conversation_pair'),
        CheckConstraint('user_low_id < user_high_id', name='ck_dm_conversation_order'),
        Index('ix_dm_conversations_low_activity', 'user_low_id', 'last_activity_time'),
        Index('ix_dm_conversations_high_activity', 'user_high_id', 'last_activity_time'),
    )

    def has_participant(self, user_id: int) -> bool:
        return user_id in (self.user_low_id, self.user_high_id)

    def other_participant(self, user_id: int) -> int:
        return self.user_high_id if user_id == self.user_low_id else self.user_low_id
