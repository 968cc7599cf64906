from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    # camelCase on the wire, snake_case accepted on input
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# bcrypt hashes at most 72 bytes
PASSWORD_MAX_BYTES = 72

# largest id a BIGINT column holds
MAX_ID = 2**63 - 1


# ---------------------------
# User Schemas
# ---------------------------
class UserBase(ApiModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["John Doe"])
    email: EmailStr = Field(..., examples=["john@example.com"])

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class UserLogin(ApiModel):
    email: EmailStr = Field(..., examples=["john@example.com"])
    password: str = Field(..., min_length=1, examples=["strongpassword123"])


class UserCreate(UserBase):
    password: str = Field(..., min_length=6, examples=["strongpassword123"])

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
        return value


class UserOut(ApiModel):
    id: int
    name: str
    email: str
    credits: int
    created_at: datetime


class TokenResponse(ApiModel):
    success: bool = True
    token: str


class UserResponse(ApiModel):
    success: bool = True
    user: UserOut


# ---------------------------
# Chat Schemas
# ---------------------------
class MessageOut(ApiModel):
    role: str = Field(..., examples=["user"])   # user | assistant
    content: str = Field(..., examples=["Hello, how are you?"])
    is_image: bool = False
    timestamp: datetime


class ChatOut(ApiModel):
    id: int
    user_id: int
    name: str
    messages: List[MessageOut] = []
    created_at: datetime
    updated_at: datetime


class ChatCreate(ApiModel):
    pass


class ChatDelete(ApiModel):
    chat_id: int = Field(..., ge=1, le=MAX_ID, examples=[1])


class ChatResponse(ApiModel):
    success: bool = True
    chat: ChatOut


class ChatListResponse(ApiModel):
    success: bool = True
    chats: List[ChatOut]


class MessageCreate(ApiModel):
    chat_id: int = Field(..., ge=1, le=MAX_ID, examples=[1])
    prompt: str = Field(..., min_length=1, examples=["Explain bearer tokens"])


class ReplyResponse(ApiModel):
    success: bool = True
    reply: MessageOut


# ---------------------------
# Credit Schemas
# ---------------------------
class PlanOut(ApiModel):
    id: str
    name: str
    price: int
    credits: int
    features: List[str]


class PlanListResponse(ApiModel):
    success: bool = True
    plans: List[PlanOut]


class StatusResponse(ApiModel):
    success: bool
    message: Optional[str] = None
