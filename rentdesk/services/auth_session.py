"""
Authentication state for the rental desk client.

The session is derived from the persisted token and confirmed by a
verification round-trip. Consumers subscribe to it instead of polling; it
emits on login, logout, authentication rejection and verification.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from errors import AuthenticationError, RentDeskError
from services.token_store import TokenStore

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VERIFYING = "verifying"
    AUTHENTICATED = "authenticated"


class SessionEvent(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    AUTH_REJECTED = "auth_rejected"
    VERIFIED = "verified"


Listener = Callable[[SessionEvent, "AuthSession"], None]


class Navigator:
    """Where the client should be showing next.

    A UI shell (or a test) inspects ``location`` and ``reload_requested``
    after session events.
    """

    def __init__(self, location: str = "/"):
        self.location = location
        self.reload_requested = False
        self.history: List[str] = [location]

    def redirect(self, path: str):
        logger.info(f"Redirecting to {path}")
        self.location = path
        self.history.append(path)

    def reload(self):
        """Ask for a full restart of client state, like a page reload."""
        logger.info("Full reload requested")
        self.reload_requested = True


class AuthSession:
    """Process-wide session state built from a persisted token."""

    def __init__(
        self,
        token_store: TokenStore,
        navigator: Optional[Navigator] = None,
        login_path: str = "/login"
    ):
        self.token_store = token_store
        self.navigator = navigator or Navigator()
        self.login_path = login_path

        self.user: Optional[Dict[str, Any]] = None
        self._verified = False
        self._verification: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._changed: Optional[asyncio.Event] = None

    # -- state --------------------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self.token_store.get()

    @property
    def status(self) -> SessionStatus:
        if not self.token:
            return SessionStatus.UNAUTHENTICATED
        if self._verified:
            return SessionStatus.AUTHENTICATED
        return SessionStatus.VERIFYING

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def is_verifying(self) -> bool:
        return self.status is SessionStatus.VERIFYING

    # -- subscriptions ------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed_event(self) -> asyncio.Event:
        if self._changed is None:
            self._changed = asyncio.Event()
        return self._changed

    def _notify_changed(self):
        if self._changed is not None:
            self._changed.set()

    def _emit(self, event: SessionEvent):
        logger.debug(f"Session event: {event.value}")
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as e:
                logger.error(f"Session listener failed on {event.value}: {e}", exc_info=True)

    # -- lifecycle ----------------------------------------------------------

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Remember the event loop that owns this session's state."""
        self._loop = loop or asyncio.get_running_loop()

    async def verify(self, auth_resource) -> Optional[Dict[str, Any]]:
        """Confirm the persisted token with the backend.

        Concurrent callers share one verification call. While it is
        outstanding the session reports VERIFYING.

        Returns:
            The user descriptor, or None when there is no valid session
        """
        if not self.token:
            return None

        if self._verification is None or self._verification.done():
            if self._loop is None:
                self.bind_loop()
            self._verified = False
            self._verification = asyncio.ensure_future(self._run_verification(auth_resource))
            self._notify_changed()

        return await asyncio.shield(self._verification)

    async def _run_verification(self, auth_resource) -> Optional[Dict[str, Any]]:
        try:
            user = await asyncio.to_thread(auth_resource.verify)
        except AuthenticationError:
            # The API client has already ended the session
            logger.info("Stored session token was rejected")
            return None
        except RentDeskError as e:
            # The token is still there; let queries surface the outage
            logger.warning(f"Session verification failed: {e}")
            user = None

        if not self.token:
            return None

        self.user = user
        self._verified = True
        self._emit(SessionEvent.VERIFIED)
        return user

    async def wait_until_verified(self):
        """Wait until a stored token has been confirmed or the session ended.

        A token that nobody has started verifying yet also counts as
        pending; the wait ends once verification starts and settles, or on
        login or logout.
        """
        while self.status is SessionStatus.VERIFYING:
            if self._verification is not None:
                if self._verification.done():
                    return
                await asyncio.wait([self._verification])
                continue

            changed = self._changed_event()
            changed.clear()
            await changed.wait()

    async def login(self, auth_resource, pin_code: str) -> Dict[str, Any]:
        """Exchange a PIN for a token and start a fresh session.

        On success the token is persisted and a full reload is requested
        rather than repairing existing client state.

        Raises:
            AuthenticationError: If the PIN is rejected
            RentDeskError: On any other failure
        """
        if self._loop is None:
            self.bind_loop()
        try:
            result = await asyncio.to_thread(auth_resource.login, pin_code)
        except RentDeskError:
            self.token_store.clear()
            raise

        self.token_store.set(result.token)
        self.user = result.user
        self._verified = True
        logger.info("Logged in")
        self._notify_changed()
        self._emit(SessionEvent.LOGIN)
        self.navigator.reload()
        return result.model_dump()

    def logout(self):
        self._end(SessionEvent.LOGOUT)

    def reject(self):
        """End the session after the backend rejected the token.

        Safe to call from a worker thread; the state change is then handed
        to the owning event loop.
        """
        loop = self._loop
        if loop is not None and loop.is_running() and not self._on_loop_thread(loop):
            loop.call_soon_threadsafe(self._end, SessionEvent.AUTH_REJECTED)
        else:
            self._end(SessionEvent.AUTH_REJECTED)

    @staticmethod
    def _on_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
        try:
            return asyncio.get_running_loop() is loop
        except RuntimeError:
            return False

    def _end(self, event: SessionEvent):
        self.token_store.clear()
        self.user = None
        self._verified = False
        logger.info(f"Session ended: {event.value}")
        self._notify_changed()
        self._emit(event)
        self.navigator.redirect(self.login_path)
