from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from . import Base

ALLOWED_EMOJIS = ('👍', '❤️', '😂', '😮', '😢', '👏')


class Reaction(Base):
    __tablename__ = 'dm_reactions'
    id = Column(Integer, primary_key=True)
    message_id = Column(Integer, ForeignKey('dm_messages.id', ondelete='CASCADE'), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    emoji = Column(String(16), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'message_id', name='uix_dm_reaction_user_message'),
    )
