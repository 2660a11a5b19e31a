"""Tests for the in-memory session store."""

from rai.sessions.store import SessionStore


def test_create_seeds_system_prompt():
    store = SessionStore()
    session = store.create("guarded", system_prompt="be careful")
    assert session.id in store
    assert [m.role for m in session.messages] == ["system"]
    assert session.public_messages() == []
    assert session.turn_count == 0
    assert session.created_at


def test_create_without_system_prompt():
    session = SessionStore().create("unguarded")
    assert session.messages == []


def test_ids_are_unique():
    store = SessionStore()
    ids = {store.create("unguarded").id for _ in range(20)}
    assert len(ids) == 20


def test_append_turns():
    store = SessionStore()
    session = store.create("unguarded")
    assert store.append_user_turn(session.id, "hi")
    assert store.append_assistant_turn(session.id, "hello") == 1
    assert [(m.role, m.content) for m in session.messages] == [("user", "hi"), ("assistant", "hello")]


def test_append_to_missing_session():
    store = SessionStore()
    assert not store.append_user_turn("nope", "hi")
    assert store.append_assistant_turn("nope", "hello") is None


def test_discard_last_user_turn_only_when_trailing():
    store = SessionStore()
    session = store.create("unguarded")
    store.append_user_turn(session.id, "first")
    store.append_assistant_turn(session.id, "reply")
    assert not store.discard_last_user_turn(session.id)

    store.append_user_turn(session.id, "second")
    assert store.discard_last_user_turn(session.id)
    assert [m.content for m in session.messages] == ["first", "reply"]


def test_clear():
    store = SessionStore()
    session = store.create("guarded")
    assert store.clear(session.id)
    assert store.get(session.id) is None
    assert not store.clear(session.id)


def test_lock_is_per_session():
    store = SessionStore()
    a = store.create("guarded")
    b = store.create("guarded")
    assert store.lock(a.id) is store.lock(a.id)
    assert store.lock(a.id) is not store.lock(b.id)


def test_eviction_drops_oldest():
    store = SessionStore(max_sessions=2)
    first = store.create("guarded")
    second = store.create("guarded")
    third = store.create("unguarded")
    assert len(store) == 2
    assert first.id not in store
    assert second.id in store and third.id in store


def test_unbounded_by_default():
    store = SessionStore()
    for _ in range(50):
        store.create("unguarded")
    assert len(store) == 50


def test_lock_for_unknown_session_is_not_kept():
    store = SessionStore()
    session = store.create("guarded")
    store.clear(session.id)

    assert store.lock(session.id) is not store.lock(session.id)
    assert store.lock("never-existed") is not store.lock("never-existed")
    assert len(store) == 0
