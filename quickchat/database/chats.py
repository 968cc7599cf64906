from typing import List

from sqlalchemy.orm import Session

from quickchat.database import models
from quickchat.database.models import utcnow
from quickchat.errors import NotFoundOrForbidden

CHAT_NAME_LENGTH = 32


def create_chat(db: Session, user_id: int) -> models.Chat:
    chat = models.Chat(user_id=user_id, name=models.DEFAULT_CHAT_NAME)
    db.add(chat)
    db.commit()
    db.refresh(chat)
    return chat


def list_chats(db: Session, user_id: int) -> List[models.Chat]:
    """Chats owned by ``user_id``, most recently updated first."""
    return (
        db.query(models.Chat)
        .filter(models.Chat.user_id == user_id)
        .order_by(models.Chat.updated_at.desc(), models.Chat.id.desc())
        .all()
    )


def get_owned_chat(db: Session, chat_id: int, user_id: int) -> models.Chat:
    # one lookup for id and owner, so a foreign chat looks exactly like a missing one
    chat = (
        db.query(models.Chat)
        .filter(models.Chat.id == chat_id, models.Chat.user_id == user_id)
        .first()
    )
    if chat is None:
        raise NotFoundOrForbidden()
    return chat


def delete_chat(db: Session, chat_id: int, user_id: int) -> None:
    chat = get_owned_chat(db, chat_id, user_id)
    db.delete(chat)
    db.commit()


def append_message(db: Session, chat: models.Chat, role: str, content: str, is_image: bool = False) -> models.Message:
    """Append a message to ``chat`` and bump its ``updated_at``; does not commit.

    The first user message also names the chat.
    """
    if role == "user" and not chat.messages:
        chat.name = content.strip()[:CHAT_NAME_LENGTH] or models.DEFAULT_CHAT_NAME
    message = models.Message(role=role, content=content, is_image=is_image, timestamp=utcnow())
    chat.messages.append(message)
    chat.updated_at = utcnow()
    return message
