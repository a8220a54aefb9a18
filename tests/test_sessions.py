from unittest import mock

import pytest

from utils.principal import TokenPair
from utils.sessions import SessionError, end_session, rotate_session, start_session


def test_start_session_stores_refresh_token(user, user_store):
    pair = start_session(user)
    assert isinstance(pair, TokenPair)
    assert user_store.find_token(pair.refresh_token) is not None


def test_rotate_replaces_stored_token(user, user_store):
    first = start_session(user)
    second = rotate_session(first.refresh_token, "user")

    assert user_store.find_token(first.refresh_token) is None
    assert user_store.find_token(second.refresh_token) is not None
    assert user_store.count_tokens(user.id) == 1


def test_token_spent_by_a_concurrent_refresh_is_rejected(user, user_store):
    pair = start_session(user)
    # lookup done before the other refresh removed the row
    stale = user_store.find_token(pair.refresh_token)

    rotate_session(pair.refresh_token, "user")

    with mock.patch.object(user_store, "find_token", return_value=stale):
        with pytest.raises(SessionError):
            rotate_session(pair.refresh_token, "user")
    assert user_store.count_tokens(user.id) == 1


def test_rotate_with_wrong_kind(user):
    pair = start_session(user)
    with pytest.raises(SessionError):
        rotate_session(pair.refresh_token, "member")


def test_end_session_is_idempotent(user, user_store):
    pair = start_session(user)
    end_session(pair.refresh_token, "user")
    end_session(pair.refresh_token, "user")
    assert user_store.find_token(pair.refresh_token) is None
