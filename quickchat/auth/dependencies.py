from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from quickchat.auth.auth import decode_access_token
from quickchat.database.db import get_db
from quickchat.database import users
from quickchat.errors import AuthError

# a missing header is reported by get_current_user, not by the scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/user/login", auto_error=False)


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    if not token:
        raise AuthError("Not authorized, no token")
    user_id = decode_access_token(token)
    user = users.get_user(db, user_id)
    if user is None:
        raise AuthError("Not authorized, user not found")
    return user
