import pytest

from quickchat.client.session import (
    FileTokenStore,
    MemoryTokenStore,
    SessionError,
    SessionManager,
    SessionState,
)

from conftest import register


class Recorder:
    def __init__(self):
        self.notifications = []
        self.redirects = 0

    def notify(self, level, message):
        self.notifications.append((level, message))

    def to_login(self):
        self.redirects += 1


@pytest.fixture
def recorder():
    return Recorder()


def make_session(client, recorder, store=None):
    return SessionManager(
        "http://testserver",
        http=client,
        token_store=store if store is not None else MemoryTokenStore(),
        notify=recorder.notify,
        on_unauthorized=recorder.to_login,
    )


def test_register_authenticates_and_persists_token(client, recorder):
    store = MemoryTokenStore()
    session = make_session(client, recorder, store)

    user = session.register("Alice", "alice@example.com", "wonderland")

    assert session.state is SessionState.AUTHENTICATED
    assert user["email"] == "alice@example.com"
    assert store.load() == session.token
    assert session.chats == []
    assert ("success", "Account created!") in recorder.notifications


def test_failed_login_returns_to_anonymous(client, recorder):
    register(client)
    session = make_session(client, recorder)

    with pytest.raises(SessionError) as excinfo:
        session.login("alice@example.com", "bad-password")

    assert excinfo.value.message == "Invalid email or password"
    assert session.state is SessionState.ANONYMOUS
    assert session.token is None
    assert recorder.notifications[-1] == ("error", "Invalid email or password")


def test_login_fetches_chats_and_selects_newest(client, recorder):
    first = make_session(client, recorder)
    first.register("Alice", "alice@example.com", "wonderland")
    first.create_chat()
    newest = first.create_chat()

    second = make_session(client, recorder)
    second.login("alice@example.com", "wonderland")

    assert second.is_authenticated
    assert [c["id"] for c in second.chats] == [c["id"] for c in first.chats]
    assert second.selected_chat["id"] == newest["id"]


def test_create_and_delete_chat_update_local_state(client, recorder):
    session = make_session(client, recorder)
    session.register("Alice", "alice@example.com", "wonderland")

    older = session.create_chat()
    newer = session.create_chat()
    assert [c["id"] for c in session.chats] == [newer["id"], older["id"]]
    assert session.selected_chat["id"] == newer["id"]

    assert session.delete_chat(newer["id"]) is True
    assert [c["id"] for c in session.chats] == [older["id"]]
    assert session.selected_chat["id"] == older["id"]
    assert ("success", "Chat Deleted") in recorder.notifications


def test_create_chat_requires_login(client, recorder):
    session = make_session(client, recorder)

    assert session.create_chat() is None
    assert recorder.notifications == [("error", "Login to create a new chat")]


def test_deleting_someone_elses_chat_fails_quietly(client, recorder):
    alice = make_session(client, recorder)
    alice.register("Alice", "alice@example.com", "wonderland")
    chat = alice.create_chat()

    bob = make_session(client, recorder)
    bob.register("Bob", "bob@example.com", "builder")

    assert bob.delete_chat(chat["id"]) is False
    assert recorder.notifications[-1] == ("error", "Chat not found")
    assert bob.is_authenticated
    assert [c["id"] for c in alice.fetch_chats()] == [chat["id"]]


def test_send_message_refreshes_chat_and_credits(client, recorder):
    session = make_session(client, recorder)
    session.register("Alice", "alice@example.com", "wonderland")
    chat = session.create_chat()

    reply = session.send_message(chat["id"], "ping")

    assert reply["content"] == "echo: ping"
    assert session.user["credits"] == 19
    assert session.chats[0]["name"] == "ping"
    assert len(session.chats[0]["messages"]) == 2


def test_unauthorized_response_forces_logout(client, recorder):
    store = MemoryTokenStore("stale.token.value")
    session = make_session(client, recorder, store)

    assert session.restore() is False

    assert session.state is SessionState.ANONYMOUS
    assert session.token is None
    assert store.load() is None
    assert recorder.redirects == 1


def test_restore_resumes_valid_session(client, recorder):
    token = register(client)
    session = make_session(client, recorder, MemoryTokenStore(token))

    assert session.restore() is True
    assert session.is_authenticated
    assert session.user["email"] == "alice@example.com"


def test_logout_clears_everything(client, recorder):
    store = MemoryTokenStore()
    session = make_session(client, recorder, store)
    session.register("Alice", "alice@example.com", "wonderland")
    session.create_chat()

    session.logout()

    assert session.state is SessionState.ANONYMOUS
    assert session.user is None
    assert session.chats == []
    assert session.selected_chat is None
    assert store.load() is None
    assert recorder.redirects == 1


def test_fetch_plans(client, recorder):
    session = make_session(client, recorder)
    session.register("Alice", "alice@example.com", "wonderland")

    assert [p["id"] for p in session.fetch_plans()] == ["basic", "pro", "premium"]


def test_file_token_store(tmp_path):
    store = FileTokenStore(tmp_path / "nested" / "token")
    assert store.load() is None

    store.save("abc.def.ghi")
    assert store.load() == "abc.def.ghi"
    assert FileTokenStore(tmp_path / "nested" / "token").load() == "abc.def.ghi"

    store.clear()
    store.clear()
    assert store.load() is None


def test_filter_chats_matches_first_message_or_name(client, recorder):
    session = make_session(client, recorder)
    session.register("Alice", "alice@example.com", "wonderland")
    talked = session.create_chat()
    session.send_message(talked["id"], "Explain Bearer tokens")
    empty = session.create_chat()

    assert [c["id"] for c in session.filter_chats("bearer")] == [talked["id"]]
    assert [c["id"] for c in session.filter_chats("  NEW chat ")] == [empty["id"]]
    assert len(session.filter_chats("")) == 2
    assert session.filter_chats("nothing like this") == []
