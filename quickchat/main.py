import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quickchat import credits
from quickchat.agents.assistant import Responder, get_responder
from quickchat.auth.auth import create_access_token
from quickchat.auth.dependencies import get_current_user
from quickchat.config.settings import get_settings
from quickchat.database import chats, models, schema, users
from quickchat.database.db import Base, engine, get_db
from quickchat.errors import AuthError, InsufficientCredits, QuickChatError, UpstreamError, ValidationError

TEXT_MESSAGE_COST = 1

logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s - %(message)s")
logger = logging.getLogger("quickchat")

app = FastAPI(title="QuickChat API", version="1.0.0")  # initiate fastapi app--server

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)


# ---------------------------
# Error handlers
# ---------------------------
def failure(message: str, status_code: int = status.HTTP_200_OK, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message}, headers=headers)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return failure(exc.message, status.HTTP_401_UNAUTHORIZED, headers={"WWW-Authenticate": "Bearer"})


@app.exception_handler(QuickChatError)
async def quickchat_error_handler(request: Request, exc: QuickChatError):
    return failure(exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = None
    return failure(ValidationError(message).message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return failure(UpstreamError().message)


@app.get('/')
async def health():
    return {"success": True, "message": "Server is Live!!"}


# ---------------------------
# User routes
# ---------------------------
@app.post('/api/user/register', response_model=schema.TokenResponse)
def register_user(user_in: schema.UserCreate, db: Session = Depends(get_db)):
    user = users.register_user(db, user_in.name, user_in.email, user_in.password)
    return {"success": True, "token": create_access_token(user.id)}


@app.post('/api/user/login', response_model=schema.TokenResponse)
def login_user(user_in: schema.UserLogin, db: Session = Depends(get_db)):
    user = users.authenticate_user(db, user_in.email, user_in.password)
    logger.info("User id=%s logged in", user.id)
    return {"success": True, "token": create_access_token(user.id)}


@app.get('/api/user/data', response_model=schema.UserResponse)
def read_me(current_user: models.User = Depends(get_current_user)):
    return {"success": True, "user": current_user}


# ---------------------------
# Chat routes
# ---------------------------
@app.get('/api/chat/get', response_model=schema.ChatListResponse)
def get_chats(current_user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "chats": chats.list_chats(db, current_user.id)}


@app.post('/api/chat/create', response_model=schema.ChatResponse)
def create_chat(
    body: schema.ChatCreate = None,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    chat = chats.create_chat(db, current_user.id)
    logger.info("User id=%s created chat id=%s", current_user.id, chat.id)
    return {"success": True, "chat": chat}


@app.post('/api/chat/delete', response_model=schema.StatusResponse)
def delete_chat(
    body: schema.ChatDelete,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    chats.delete_chat(db, body.chat_id, current_user.id)
    logger.info("User id=%s deleted chat id=%s", current_user.id, body.chat_id)
    return {"success": True, "message": "Chat Deleted"}


# ---------------------------
# Message routes
# ---------------------------
@app.post('/api/message/text', response_model=schema.ReplyResponse)
async def text_message(
    body: schema.MessageCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    responder: Responder = Depends(get_responder),
):
    chat = chats.get_owned_chat(db, body.chat_id, current_user.id)
    if current_user.credits < TEXT_MESSAGE_COST:
        raise InsufficientCredits()

    try:
        reply_text = await responder(list(chat.messages), body.prompt)
    except QuickChatError:
        raise
    except Exception:
        logger.exception("Assistant failed to answer in chat id=%s", chat.id)
        raise UpstreamError("The assistant is unavailable right now, please try again")

    chats.append_message(db, chat, "user", body.prompt)
    reply = chats.append_message(db, chat, "assistant", reply_text)
    try:
        users.deduct_credits(db, current_user.id, TEXT_MESSAGE_COST)
    except InsufficientCredits:
        db.rollback()
        raise
    db.commit()
    db.refresh(reply)
    return {"success": True, "reply": reply}


# ---------------------------
# Credit routes
# ---------------------------
@app.get('/api/credit/plan', response_model=schema.PlanListResponse)
def get_plans(current_user: models.User = Depends(get_current_user)):
    return {"success": True, "plans": credits.list_plans()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quickchat.main:app", host="0.0.0.0", port=8000)
