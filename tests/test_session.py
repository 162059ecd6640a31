"""Tests for session state and credential storage."""
import time
from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from ufc_dashboard.errors import AuthInvalid
from ufc_dashboard.notices import NoticeBoard
from ufc_dashboard.session import (
    EXPIRED_MESSAGE,
    LOGGED_OUT_MESSAGE,
    MALFORMED_MESSAGE,
    Session,
    TokenStore,
    decode_expiry,
)

from tests.conftest import make_token


class TestDecodeExpiry:
    """Tests for reading the exp claim."""

    def test_reads_exp_without_verifying_signature(self):
        """Test that exp is decoded regardless of the signing key."""
        token = make_token(now=1_700_000_000, expires_in=60)
        assert decode_expiry(token) == datetime.fromtimestamp(1_700_000_060, tz=timezone.utc)

    @pytest.mark.parametrize("token", ["not-a-jwt", "a.b.c", ""])
    def test_malformed_token(self, token):
        """Test that garbage tokens are rejected as malformed."""
        with pytest.raises(AuthInvalid) as exc:
            decode_expiry(token)
        assert exc.value.reason == "malformed"

    def test_missing_expiry(self):
        """Test that a token without exp is rejected."""
        with pytest.raises(AuthInvalid) as exc:
            decode_expiry(make_token(expires_in=None))
        assert exc.value.reason == "missing-expiry"


class TestSession:
    """Tests for the Session state machine."""

    def test_valid_credential(self):
        """Test that a fresh token makes the session valid."""
        session = Session()
        assert session.set_credential(make_token())
        assert session.is_valid()
        assert session.auth_headers() == {"Authorization": f"Bearer {session.credential}"}

    @freeze_time("2025-01-15 12:00:00")
    def test_expired_credential_is_purged(self):
        """Test that an already elapsed token logs out with a notice."""
        notices = NoticeBoard()
        session = Session(notices=notices)
        assert not session.set_credential(make_token(expires_in=-1))
        assert session.credential is None
        assert not session.is_valid()
        assert [n.message for n in notices.drain()] == [EXPIRED_MESSAGE]

    def test_malformed_credential_notice(self):
        """Test that a malformed token raises the invalid-session notice."""
        notices = NoticeBoard()
        session = Session(notices=notices)
        assert not session.set_credential("garbage")
        assert [n.message for n in notices.drain()] == [MALFORMED_MESSAGE]

    def test_expiry_lapses_while_view_is_open(self):
        """Test that require_valid re-checks expiry on every call."""
        with freeze_time("2025-01-15 12:00:00") as frozen:
            notices = NoticeBoard()
            session = Session(notices=notices)
            assert session.set_credential(make_token(expires_in=60))
            assert session.require_valid()

            frozen.tick(timedelta(seconds=120))

            with pytest.raises(AuthInvalid):
                session.require_valid()
            assert session.credential is None
            assert [n.message for n in notices.drain()] == [EXPIRED_MESSAGE]

            # already logged out: no second notice
            assert not session.validate_on_mount()
            assert len(notices) == 0

    def test_require_valid_without_credential(self):
        """Test that an empty session raises AuthInvalid with reason absent."""
        with pytest.raises(AuthInvalid) as exc:
            Session().require_valid()
        assert exc.value.reason == "absent"

    def test_missing_credential_notice_once(self):
        """Test that a never-logged-in session raises one log-in notice."""
        notices = NoticeBoard()
        session = Session(notices=notices)
        assert not session.validate_on_mount()
        assert not session.validate_on_mount()
        assert [n.message for n in notices.drain()] == [LOGGED_OUT_MESSAGE]

        assert session.set_credential(make_token())
        session.logout()
        assert not session.validate_on_mount()
        assert len(notices) == 0

    def test_injected_clock(self):
        """Test that an explicit clock drives expiry."""
        now = [1_000.0]
        session = Session(clock=lambda: now[0])
        assert session.set_credential(make_token(now=1_000, expires_in=10))
        now[0] = 1_010.0
        assert not session.is_valid()

    def test_logout_runs_hooks_once(self):
        """Test that teardown hooks run on logout and are then dropped."""
        session = Session()
        session.set_credential(make_token())
        calls = []
        session.on_logout(lambda: calls.append("closed"))
        session.logout()
        session.logout()
        assert calls == ["closed"]

    def test_failing_hook_does_not_block_others(self):
        """Test that one failing teardown hook does not skip the rest."""
        session = Session()
        session.set_credential(make_token())
        calls = []

        def broken():
            raise RuntimeError("boom")

        session.on_logout(broken)
        session.on_logout(lambda: calls.append("closed"))
        session.logout()
        assert calls == ["closed"]


class TestTokenStore:
    """Tests for durable credential storage."""

    def test_session_persists_and_restores(self, tmp_path):
        """Test that a valid token survives a new Session."""
        store = TokenStore(tmp_path / "session.json")
        token = make_token()
        Session(store=store).set_credential(token)

        restored = Session(store=store)
        assert restored.credential == token
        assert restored.is_valid()

    def test_logout_clears_store(self, tmp_path):
        """Test that logging out removes the stored token."""
        store = TokenStore(tmp_path / "session.json")
        session = Session(store=store)
        session.set_credential(make_token())
        session.logout()
        assert store.load() is None
        assert not store.path.exists()

    def test_expired_stored_token_is_purged_on_restore(self, tmp_path):
        """Test that restoring an expired token logs out and clears it."""
        store = TokenStore(tmp_path / "session.json")
        store.save(make_token(now=time.time() - 7200, expires_in=60))

        notices = NoticeBoard()
        session = Session(store=store, notices=notices)
        assert session.credential is None
        assert store.load() is None
        assert [n.message for n in notices.drain()] == [EXPIRED_MESSAGE]

    def test_corrupt_store_is_ignored(self, tmp_path):
        """Test that an unreadable store behaves like an empty one."""
        path = tmp_path / "session.json"
        path.write_text("{not json", encoding="utf-8")
        assert TokenStore(path).load() is None
