from sqlalchemy import Column, Integer, BigInteger, Text, ForeignKey, Index
from . import Base


class Message(Base):
    __tablename__ = 'dm_messages'
    id = Column(Integer, primary_key=True)
    conversation_id = Column(Integer, ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False)
    sender_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), index=True, nullable=False)
    content = Column(Text, nullable=False)
    parent_message_id = Column(Integer, ForeignKey('dm_messages.id', ondelete='SET NULL'), nullable=True)
    creation_time = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index('ix_dm_messages_conversation_time', 'conversation_id', 'creation_time'),
    )
