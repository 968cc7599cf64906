from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Text,
)
from sqlalchemy.orm import relationship

from .db import Base

# SQLite only autoincrements INTEGER primary keys
Id = BigInteger().with_variant(Integer, "sqlite")

DEFAULT_CHAT_NAME = "New Chat"


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = 'user'
    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    email = Column(Text, unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    credits = Column(Integer, nullable=False, default=20)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    chats = relationship("Chat", back_populates="user", cascade="all, delete-orphan")


class Chat(Base):
    __tablename__ = 'chats'
    id = Column(Id, primary_key=True, autoincrement=True)
    user_id = Column(Id, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False, default=DEFAULT_CHAT_NAME)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="chats")
    messages = relationship(
        "Message",
        back_populates="chat",
        order_by="Message.id",
        cascade="all, delete-orphan",
    )


class Message(Base):
    __tablename__ = 'messages'
    id = Column(Id, primary_key=True, autoincrement=True)
    chat_id = Column(Id, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Text, CheckConstraint("role IN ('user','assistant')"), nullable=False)
    content = Column(Text, nullable=False)
    is_image = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)

    chat = relationship("Chat", back_populates="messages")
