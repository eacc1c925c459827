"""
Unit tests for the observable authentication state.
"""

import asyncio
from unittest.mock import Mock

import pytest

from errors import AuthenticationError, ConnectivityError
from models.auth import LoginResponse
from services.auth_session import AuthSession, Navigator, SessionEvent, SessionStatus
from services.token_store import MemoryTokenStore


@pytest.fixture
def navigator():
    return Navigator()


class TestSessionStatus:
    def test_no_token_is_unauthenticated(self, navigator):
        session = AuthSession(MemoryTokenStore(), navigator)
        assert session.status is SessionStatus.UNAUTHENTICATED

    def test_unverified_token_is_verifying(self, navigator):
        session = AuthSession(MemoryTokenStore("token"), navigator)
        assert session.status is SessionStatus.VERIFYING

    @pytest.mark.asyncio
    async def test_verification_authenticates(self, navigator):
        session = AuthSession(MemoryTokenStore("token"), navigator)
        auth = Mock()
        auth.verify.return_value = {"role": "admin"}
        events = []
        session.subscribe(lambda event, s: events.append(event))

        user = await session.verify(auth)

        assert user == {"role": "admin"}
        assert session.is_authenticated
        assert session.user == {"role": "admin"}
        assert events == [SessionEvent.VERIFIED]

    @pytest.mark.asyncio
    async def test_verify_without_token_does_nothing(self, navigator):
        session = AuthSession(MemoryTokenStore(), navigator)
        auth = Mock()

        assert await session.verify(auth) is None
        auth.verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejected_token_ends_session(self, navigator):
        store = MemoryTokenStore("expired")
        session = AuthSession(store, navigator)
        auth = Mock()

        def verify():
            # What the API client does on HTTP 401
            store.clear()
            session.reject()
            raise AuthenticationError()

        auth.verify.side_effect = verify
        events = []
        session.subscribe(lambda event, s: events.append(event))

        assert await session.verify(auth) is None
        await asyncio.sleep(0)

        assert session.status is SessionStatus.UNAUTHENTICATED
        assert events == [SessionEvent.AUTH_REJECTED]
        assert navigator.location == "/login"

    @pytest.mark.asyncio
    async def test_unreachable_backend_keeps_token(self, navigator):
        session = AuthSession(MemoryTokenStore("token"), navigator)
        auth = Mock()
        auth.verify.side_effect = ConnectivityError("down")

        assert await session.verify(auth) is None
        assert session.is_authenticated
        assert navigator.location == "/"


class TestLoginLogout:
    @pytest.mark.asyncio
    async def test_login_persists_token_and_requests_reload(self, navigator):
        store = MemoryTokenStore()
        session = AuthSession(store, navigator)
        auth = Mock()
        auth.login.return_value = LoginResponse(token="fresh")
        events = []
        session.subscribe(lambda event, s: events.append(event))

        await session.login(auth, "1234")

        auth.login.assert_called_once_with("1234")
        assert store.get() == "fresh"
        assert session.is_authenticated
        assert navigator.reload_requested
        assert events == [SessionEvent.LOGIN]

    @pytest.mark.asyncio
    async def test_failed_login_clears_token(self, navigator):
        store = MemoryTokenStore("stale")
        session = AuthSession(store, navigator)
        auth = Mock()
        auth.login.side_effect = AuthenticationError("Неверный PIN")

        with pytest.raises(AuthenticationError):
            await session.login(auth, "0000")

        assert store.get() is None
        assert not navigator.reload_requested

    def test_logout_clears_token_and_redirects(self, navigator):
        store = MemoryTokenStore("token")
        session = AuthSession(store, navigator)
        listener = Mock()
        session.subscribe(listener)

        session.logout()

        assert store.get() is None
        assert session.status is SessionStatus.UNAUTHENTICATED
        assert navigator.location == "/login"
        listener.assert_called_once_with(SessionEvent.LOGOUT, session)

    def test_unsubscribe(self, navigator):
        session = AuthSession(MemoryTokenStore("token"), navigator)
        listener = Mock()
        unsubscribe = session.subscribe(listener)

        unsubscribe()
        session.logout()

        listener.assert_not_called()

    def test_failing_listener_does_not_break_others(self, navigator):
        session = AuthSession(MemoryTokenStore("token"), navigator)
        session.subscribe(Mock(side_effect=RuntimeError("listener bug")))
        second = Mock()
        session.subscribe(second)

        session.logout()

        second.assert_called_once()

    @pytest.mark.asyncio
    async def test_reject_from_worker_thread_runs_on_loop(self, navigator):
        store = MemoryTokenStore("token")
        session = AuthSession(store, navigator)
        session.bind_loop()

        await asyncio.to_thread(session.reject)
        await asyncio.sleep(0)

        assert session.status is SessionStatus.UNAUTHENTICATED
        assert navigator.location == "/login"
