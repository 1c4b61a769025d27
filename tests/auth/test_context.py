from __future__ import annotations

import logging

import pytest

from planstore.auth.context import IdentityContext
from planstore.contracts import SessionIdentity


def test_starts_anonymous() -> None:
    context = IdentityContext()

    assert context.get_user_id() == "anonymous"
    assert context.is_authenticated() is False
    assert context.current() == SessionIdentity.anonymous()


def test_set_and_clear_user_notify_observers_in_order() -> None:
    context = IdentityContext()
    seen: list[tuple[str, str, bool]] = []
    context.subscribe(lambda identity: seen.append(("first", identity.user_id, identity.authenticated)))
    context.subscribe(lambda identity: seen.append(("second", identity.user_id, identity.authenticated)))

    context.set_user("user-1")
    context.clear_user()

    assert seen == [
        ("first", "user-1", True),
        ("second", "user-1", True),
        ("first", "anonymous", False),
        ("second", "anonymous", False),
    ]


def test_blank_user_id_is_ignored(caplog: pytest.LogCaptureFixture) -> None:
    context = IdentityContext()
    calls: list[SessionIdentity] = []
    context.subscribe(calls.append)

    with caplog.at_level(logging.ERROR, logger="planstore.auth.context"):
        context.set_user("   ")

    assert context.is_authenticated() is False
    assert calls == []
    assert "blank user id" in caplog.text


def test_observer_list_is_bounded() -> None:
    context = IdentityContext(max_observers=2)
    context.subscribe(lambda identity: None)
    context.subscribe(lambda identity: None)

    with pytest.raises(ValueError, match="at most 2"):
        context.subscribe(lambda identity: None)


def test_user_id_is_trimmed() -> None:
    context = IdentityContext()

    context.set_user("  user-1 ")

    assert context.get_user_id() == "user-1"
