"""Tests for accounts, password hashing and sessions."""

from datetime import datetime, timedelta, timezone

import pytest

from mezmurhub.core.database import init_database, make_connection_factory
from mezmurhub.domain.auth import (
    AuthError,
    AuthService,
    DuplicateUserError,
    InMemoryUserStore,
    Session,
    SqlUserStore,
)


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture(params=["memory", "sqlite"])
def user_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryUserStore()
    connect = make_connection_factory(db_path=tmp_path / "users.db")
    init_database(connect)
    return SqlUserStore(connect)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth(user_store, clock):
    return AuthService(user_store, session_ttl=timedelta(hours=1), clock=clock)


class TestAccounts:
    def test_create_user_hashes_password(self, auth):
        user = auth.create_user("Admin@Example.com ", "correct horse", is_admin=True)

        assert user.email == "admin@example.com"
        assert user.is_admin
        assert user.password_hash != "correct horse"
        assert user.password_hash.startswith("$argon2")

    def test_duplicate_email_rejected(self, auth):
        auth.create_user("a@example.com", "password1")
        with pytest.raises(DuplicateUserError):
            auth.create_user("A@example.com", "password2")

    def test_short_password_rejected(self, auth):
        with pytest.raises(AuthError):
            auth.create_user("a@example.com", "short")

    def test_invalid_email_rejected(self, auth):
        with pytest.raises(AuthError):
            auth.create_user("not-an-email", "password1")

    def test_set_admin(self, auth):
        auth.create_user("a@example.com", "password1")

        assert auth.set_admin("a@example.com").is_admin
        assert not auth.set_admin("a@example.com", is_admin=False).is_admin

    def test_set_admin_unknown_user(self, auth):
        with pytest.raises(AuthError):
            auth.set_admin("nobody@example.com")

    def test_list_users_sorted_by_email(self, auth):
        auth.create_user("b@example.com", "password1")
        auth.create_user("a@example.com", "password1")
        assert [u.email for u in auth.list_users()] == ["a@example.com", "b@example.com"]


class TestSessions:
    def test_sign_in_and_lookup(self, auth):
        auth.create_user("a@example.com", "password1", is_admin=True)

        session = auth.sign_in("A@EXAMPLE.COM", "password1")

        assert session.email == "a@example.com"
        assert session.is_admin
        assert session.token
        assert auth.get_session(session.token) == session

    @pytest.mark.parametrize(
        "email,password",
        [("a@example.com", "wrong-password"), ("nobody@example.com", "password1")],
    )
    def test_bad_credentials_share_one_message(self, auth, email, password):
        auth.create_user("a@example.com", "password1")
        with pytest.raises(AuthError, match="Invalid email or password"):
            auth.sign_in(email, password)

    def test_session_expires(self, auth, clock):
        auth.create_user("a@example.com", "password1")
        session = auth.sign_in("a@example.com", "password1")

        clock.now += timedelta(hours=1)

        assert auth.get_session(session.token) is None

    def test_sign_in_purges_expired_sessions(self, auth, clock):
        """Abandoned tokens are dropped on the next sign-in, not kept forever."""
        auth.create_user("a@example.com", "password1")
        stale = [auth.sign_in("a@example.com", "password1").token for _ in range(3)]

        clock.now += timedelta(hours=1)
        fresh = auth.sign_in("a@example.com", "password1")

        assert list(auth._sessions) == [fresh.token]
        assert all(token not in auth._sessions for token in stale)

    def test_sign_out(self, auth):
        auth.create_user("a@example.com", "password1")
        session = auth.sign_in("a@example.com", "password1")

        assert auth.sign_out(session.token)
        assert auth.get_session(session.token) is None
        assert not auth.sign_out(session.token)

    def test_unknown_token(self, auth):
        assert auth.get_session(None) is None
        assert auth.get_session("made-up") is None


def test_system_session_actor():
    assert Session.system().actor == "system"
