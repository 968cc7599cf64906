import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quickchat.auth.auth import hash_password, verify_password
from quickchat.config.settings import get_settings
from quickchat.database import models
from quickchat.errors import ConflictError, InsufficientCredits, InvalidCredentials

logger = logging.getLogger("quickchat.users")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: int):
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def register_user(db: Session, name: str, email: str, password: str) -> models.User:
    """Persist a new user, refusing an email that is already registered."""
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise ConflictError()

    new_user = models.User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        credits=get_settings().default_credits,
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent registration
        db.rollback()
        raise ConflictError()
    db.refresh(new_user)
    logger.info("Registered user id=%s", new_user.id)
    return new_user


def authenticate_user(db: Session, email: str, password: str) -> models.User:
    """Return the user for a matching email/password pair.

    Unknown emails and wrong passwords raise the same InvalidCredentials.
    """
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


def deduct_credits(db: Session, user_id: int, amount: int = 1) -> None:
    """Atomically take ``amount`` credits; does not commit."""
    updated = (
        db.query(models.User)
        .filter(models.User.id == user_id, models.User.credits >= amount)
        .update({models.User.credits: models.User.credits - amount}, synchronize_session="fetch")
    )
    if not updated:
        raise InsufficientCredits()
