"""
Testing in-memory play sessions
- Create a session, make guesses, and check status/history/hints/streaks.
"""

from datetime import date, timedelta

from fusdle import time_client
from fusdle.store import SessionStore

DAY = date(2025, 6, 1)
HINTS = ["Sweet treat", "Orange wrapper", "Reese's"]


def _start(store, difficulty="normal"):
    return store.create(2, DAY, "Peanut Butter Cup", HINTS, difficulty=difficulty)


def test_store_create_and_guess_basic():
    store = SessionStore()
    session = _start(store)

    assert session.status == "playing"
    assert session.attempts_left is None  # unlimited

    session, verdict = store.guess(session.id, "banana", DAY)
    assert verdict.match_type == "none"
    session, verdict = store.guess(session.id, "butter", DAY)
    assert verdict.match_type == "exact-word"
    assert session.status == "playing"
    assert session.partial_match_indices == [1]

    session, verdict = store.guess(session.id, "peanut butter cup", DAY)
    assert verdict.is_correct
    assert session.status == "won"
    assert len(session.attempts) == 3

    # Guesses after the end are ignored
    session, verdict = store.guess(session.id, "anything", DAY)
    assert verdict is None
    assert len(session.attempts) == 3


def test_unknown_session():
    store = SessionStore()
    assert store.get("nope") is None
    assert store.guess("nope", "x") == (None, None)
    assert store.give_up("nope") is None
    assert store.reveal_hint("nope") == ("not_found", None)


def test_max_attempts_loses():
    store = SessionStore(max_attempts=2)
    session = _start(store)
    store.guess(session.id, "banana", DAY)
    assert session.attempts_left == 1
    session, _ = store.guess(session.id, "apple", DAY)
    assert session.status == "lost"
    assert session.attempts_left == 0
    assert store.get_stats().games_lost == 1


def test_hints_unlock_one_per_guess():
    store = SessionStore()
    session = _start(store)

    assert store.reveal_hint(session.id) == ("locked", None)

    store.guess(session.id, "banana", DAY)
    assert store.reveal_hint(session.id) == ("ok", "Sweet treat")
    assert store.reveal_hint(session.id) == ("locked", None)

    store.guess(session.id, "apple", DAY)
    store.guess(session.id, "kiwi", DAY)
    store.guess(session.id, "pear", DAY)
    assert store.reveal_hint(session.id) == ("ok", "Orange wrapper")
    assert store.reveal_hint(session.id) == ("ok", "Reese's")
    assert store.reveal_hint(session.id) == ("exhausted", None)
    assert session.hints_used_at_attempts == [1, 4, 4]

    store.give_up(session.id, DAY)
    assert store.reveal_hint(session.id) == ("finished", None)


def test_give_up():
    store = SessionStore()
    session = _start(store)
    store.guess(session.id, "banana", DAY)
    session = store.give_up(session.id, DAY)
    assert session.status == "gave_up"

    # Giving up twice does not count twice
    store.give_up(session.id, DAY)
    stats = store.get_stats()
    assert stats.games_gave_up == 1
    assert stats.current_streak == 0
    assert stats.hard_mode_unlocked is True


def test_streaks_on_consecutive_days():
    store = SessionStore()

    first = _start(store)
    store.guess(first.id, "peanut butter cup", DAY)
    second = _start(store)
    store.guess(second.id, "peanut butter cup", DAY + timedelta(days=1))

    stats = store.get_stats()
    assert stats.games_started == 2
    assert stats.games_won == 2
    assert stats.normal_won == 2
    assert stats.current_streak == 2
    assert stats.best_streak == 2
    assert stats.flawless_streak == 2
    assert stats.last_won_on == DAY + timedelta(days=1)


def test_same_day_win_keeps_streak():
    store = SessionStore()
    normal = _start(store)
    store.guess(normal.id, "peanut butter cup", DAY)
    hard = _start(store, difficulty="hard")
    store.guess(hard.id, "peanut butter cup", DAY)

    stats = store.get_stats()
    assert stats.current_streak == 1
    assert stats.flawless_streak == 1
    assert stats.hard_won == 1


def test_gap_restarts_streak():
    store = SessionStore()
    first = _start(store)
    store.guess(first.id, "peanut butter cup", DAY)
    later = _start(store)
    store.guess(later.id, "peanut butter cup", DAY + timedelta(days=3))
    assert store.get_stats().current_streak == 1
    assert store.get_stats().best_streak == 1


def test_hint_breaks_flawless_streak():
    store = SessionStore()
    first = _start(store)
    store.guess(first.id, "peanut butter cup", DAY)
    assert store.get_stats().flawless_streak == 1

    second = _start(store)
    store.guess(second.id, "banana", DAY + timedelta(days=1))
    store.reveal_hint(second.id)
    assert store.get_stats().flawless_streak == 0

    store.guess(second.id, "peanut butter cup", DAY + timedelta(days=1))
    stats = store.get_stats()
    assert stats.current_streak == 2
    assert stats.flawless_streak == 0


def test_hard_mode_stays_locked_after_hard_only():
    store = SessionStore()
    hard = _start(store, difficulty="hard")
    store.guess(hard.id, "peanut butter cup", DAY)
    assert store.get_stats().hard_mode_unlocked is False


def test_reset_stats():
    store = SessionStore()
    session = _start(store)
    store.guess(session.id, "peanut butter cup", DAY)
    store.reset_stats()
    assert store.get_stats().games_won == 0


def test_stale_sessions_are_evicted_on_create():
    store = SessionStore(session_ttl_seconds=60)
    old = _start(store)
    store.give_up(old.id, DAY)
    old.updated_at -= 120

    fresh = _start(store)
    assert store.get(old.id) is None
    assert store.get(fresh.id) is fresh
    assert len(store) == 1
    # The scoreboard outlives the sessions
    assert store.get_stats().games_gave_up == 1


def test_many_finished_sessions_do_not_pile_up():
    store = SessionStore(session_ttl_seconds=60)
    for _ in range(1000):
        session = _start(store)
        store.give_up(session.id, DAY)
        session.updated_at -= 120
    _start(store)
    assert len(store) == 1


def test_active_sessions_survive_eviction():
    store = SessionStore(session_ttl_seconds=60)
    session = _start(store)
    assert store.evict_stale() == 0
    assert store.evict_stale(now=session.updated_at + 61) == 1


def test_zero_ttl_keeps_everything():
    store = SessionStore(session_ttl_seconds=0)
    session = _start(store)
    assert store.evict_stale(now=session.updated_at + 10**9) == 0
    assert store.get(session.id) is session


def test_missing_date_uses_puzzle_timezone(monkeypatch):
    monkeypatch.setattr(time_client, "local_today", lambda: DAY + timedelta(days=3))
    store = SessionStore()
    session = _start(store)
    store.guess(session.id, "peanut butter cup")
    assert store.get_stats().last_won_on == DAY + timedelta(days=3)
