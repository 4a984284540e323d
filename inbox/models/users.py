from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from . import Base


class User(Base):
    """Identity-owned user row; this service reads it and only writes inbox_enabled."""
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(150), unique=True, index=True, nullable=True)
    name = Column(String(150), nullable=False)
    image_url = Column(String, nullable=True)
    role = Column(String(50), nullable=True)
    # NULL means the user never set it; see users.inbox_enabled()
    inbox_enabled = Column(Boolean, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
