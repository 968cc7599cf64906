"""Client-side session for the QuickChat API.

``SessionManager`` holds the signed-in user, their chats and the bearer token,
persists the token through a ``TokenStore`` and attaches it to every request.
A 401 from any call forces a logout. The manager is an explicit object handed
to whatever renders the UI; nothing here is module-global.
"""
import enum
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import requests

logger = logging.getLogger("quickchat.client")


class SessionState(str, enum.Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionError(Exception):
    """A request the server answered with ``success: false`` (or not at all)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class Unauthorized(SessionError):
    pass


class MemoryTokenStore:
    def __init__(self, token: Optional[str] = None):
        self._token = token

    def load(self) -> Optional[str]:
        return self._token

    def save(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Keeps the token in a small file, the way a browser keeps it in local storage."""

    def __init__(self, path=None):
        self.path = Path(path) if path else Path.home() / ".quickchat" / "token"

    def load(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def _log_notification(level: str, message: str) -> None:
    logger.log(logging.ERROR if level == "error" else logging.INFO, message)


class SessionManager:
    def __init__(
        self,
        base_url: str,
        http=None,
        token_store=None,
        notify: Callable[[str, str], None] = None,
        on_unauthorized: Callable[[], None] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.token_store = token_store if token_store is not None else FileTokenStore()
        self.notify = notify or _log_notification
        self.on_unauthorized = on_unauthorized

        self.state = SessionState.ANONYMOUS
        self.token: Optional[str] = self.token_store.load()
        self.user: Optional[Dict[str, Any]] = None
        self.chats: List[Dict[str, Any]] = []
        self.selected_chat: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    # ---------------- transport ----------------
    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Dict[str, Any]:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = self.http.request(method, f"{self.base_url}{path}", json=json, headers=headers)
        except requests.RequestException as exc:
            raise SessionError(f"Could not reach the server: {exc}")

        if response.status_code == 401:
            try:
                message = response.json().get("message") or "Not authorized"
            except ValueError:
                message = "Not authorized"
            self._expire()
            raise Unauthorized(message, status_code=401)

        try:
            data = response.json()
        except ValueError:
            raise SessionError(f"Unexpected response ({response.status_code})", status_code=response.status_code)
        if not data.get("success"):
            raise SessionError(data.get("message") or "Request failed", status_code=response.status_code)
        return data

    def _set_token(self, token: Optional[str]) -> None:
        self.token = token
        if token:
            self.token_store.save(token)
        else:
            self.token_store.clear()

    def _reset(self) -> None:
        self._set_token(None)
        self.user = None
        self.chats = []
        self.selected_chat = None
        self.state = SessionState.ANONYMOUS

    def _expire(self) -> None:
        logger.info("Server rejected the session token, logging out")
        self._reset()
        if self.on_unauthorized:
            self.on_unauthorized()

    # ---------------- authentication ----------------
    def _authenticate(self, path: str, body: dict) -> Dict[str, Any]:
        self.state = SessionState.AUTHENTICATING
        try:
            data = self._request("POST", path, json=body)
            self._set_token(data["token"])
            self.user = self._request("GET", "/api/user/data")["user"]
        except SessionError as exc:
            self._reset()
            self.notify("error", exc.message)
            raise
        self.state = SessionState.AUTHENTICATED
        self.fetch_chats()
        return self.user

    def login(self, email: str, password: str) -> Dict[str, Any]:
        user = self._authenticate("/api/user/login", {"email": email, "password": password})
        self.notify("success", "Login successful!")
        return user

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        user = self._authenticate("/api/user/register", {"name": name, "email": email, "password": password})
        self.notify("success", "Account created!")
        return user

    def restore(self) -> bool:
        """Resume a session from a stored token; returns whether it is still valid."""
        if not self.token:
            return False
        self.state = SessionState.AUTHENTICATING
        try:
            self.user = self._request("GET", "/api/user/data")["user"]
        except Unauthorized:
            return False
        except SessionError as exc:
            self._reset()
            self.notify("error", exc.message)
            return False
        self.state = SessionState.AUTHENTICATED
        self.fetch_chats()
        return True

    def logout(self) -> None:
        self._reset()
        self.notify("success", "Logged out successfully")
        if self.on_unauthorized:
            self.on_unauthorized()

    # ---------------- user data ----------------
    def fetch_user(self) -> Optional[Dict[str, Any]]:
        self.user = self._request("GET", "/api/user/data")["user"]
        return self.user

    def fetch_plans(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/credit/plan")["plans"]

    # ---------------- chats ----------------
    def _call(self, method: str, path: str, json: Optional[dict] = None) -> Optional[Dict[str, Any]]:
        """Like _request, but surfaces non-auth failures as notifications instead of raising."""
        try:
            return self._request(method, path, json=json)
        except Unauthorized:
            raise
        except SessionError as exc:
            self.notify("error", exc.message)
            return None

    def fetch_chats(self) -> List[Dict[str, Any]]:
        data = self._call("GET", "/api/chat/get")
        if data is None:
            return self.chats
        self.chats = data.get("chats") or []
        selected_id = self.selected_chat["id"] if self.selected_chat else None
        self.selected_chat = next((c for c in self.chats if c["id"] == selected_id), None)
        if self.selected_chat is None and self.chats:
            self.selected_chat = self.chats[0]
        return self.chats

    def filter_chats(self, term: str) -> List[Dict[str, Any]]:
        """Chats whose first message (or name, when empty) contains ``term``, ignoring case."""
        term = term.strip().lower()

        def label(chat):
            messages = chat.get("messages") or []
            return (messages[0]["content"] if messages else chat.get("name") or "").lower()

        return [chat for chat in self.chats if term in label(chat)]

    def create_chat(self) -> Optional[Dict[str, Any]]:
        if not self.is_authenticated:
            self.notify("error", "Login to create a new chat")
            return None
        data = self._call("POST", "/api/chat/create", json={})
        if data is None:
            return None
        chat = data["chat"]
        self.chats = [chat] + [c for c in self.chats if c["id"] != chat["id"]]
        self.selected_chat = chat
        self.notify("success", "New chat created successfully")
        return chat

    def delete_chat(self, chat_id: int) -> bool:
        data = self._call("POST", "/api/chat/delete", json={"chatId": chat_id})
        if data is None:
            return False
        self.chats = [c for c in self.chats if c["id"] != chat_id]
        if self.selected_chat and self.selected_chat["id"] == chat_id:
            self.selected_chat = self.chats[0] if self.chats else None
        self.notify("success", data.get("message") or "Chat Deleted")
        return True

    def send_message(self, chat_id: int, prompt: str) -> Optional[Dict[str, Any]]:
        data = self._call("POST", "/api/message/text", json={"chatId": chat_id, "prompt": prompt})
        if data is None:
            return None
        reply = data["reply"]
        # the prompt was stored server-side too
        self.fetch_chats()
        if self.user is not None:
            self.user["credits"] = max(self.user.get("credits", 0) - 1, 0)
        return reply
