"""
Application context: owns the session, the API client and the query cache.

Startup is explicit and two-phase. ``AppContext.start`` first resolves a
live backend (the probe runs in a worker thread), then wires the resources
and kicks off session verification. Nothing touches the backend before
``start`` has completed.
"""

import asyncio
import logging
from typing import Optional, Sequence

from api_client import ApiClient, FailoverPolicy
from config import settings
from resources.analytics_resource import AnalyticsResource
from resources.auth_resource import AuthResource
from resources.customer_resource import CustomerResource
from resources.equipment_resource import EquipmentResource
from resources.expense_resource import ExpenseResource
from resources.rental_resource import RentalResource
from services.auth_session import AuthSession, Navigator, SessionEvent
from services.query_client import QueryClient
from services.token_store import TokenStore

logger = logging.getLogger(__name__)


class AppContext:
    """Everything a running client session shares."""

    def __init__(
        self,
        token_store: Optional[TokenStore] = None,
        navigator: Optional[Navigator] = None,
        candidates: Optional[Sequence[str]] = None,
        **client_options
    ):
        self.token_store = token_store or TokenStore(settings.token_file)
        self.navigator = navigator or Navigator()
        self.candidates = list(candidates or settings.candidate_servers)
        self.client_options = client_options

        self.session = AuthSession(self.token_store, self.navigator, settings.login_path)
        self.queries = QueryClient(self.session)
        self.client: Optional[ApiClient] = None
        self._ready: Optional[asyncio.Task] = None
        self._unsubscribe = self.session.subscribe(self._on_session_event)

        self.rentals: Optional[RentalResource] = None
        self.equipment: Optional[EquipmentResource] = None
        self.expenses: Optional[ExpenseResource] = None
        self.customers: Optional[CustomerResource] = None
        self.analytics: Optional[AnalyticsResource] = None
        self.auth: Optional[AuthResource] = None

    async def start(self) -> "AppContext":
        """Resolve the live backend, then verify the persisted session.

        Safe to await from several places; initialization runs once.
        """
        if self._ready is None:
            self.session.bind_loop()
            self._ready = asyncio.ensure_future(self._initialize())
        await asyncio.shield(self._ready)
        return self

    async def _initialize(self):
        options = dict(self.client_options)
        options.setdefault("failover_policy", FailoverPolicy(settings.failover_policy))

        self.client = await asyncio.to_thread(
            ApiClient.create,
            self.candidates,
            token_store=self.token_store,
            on_auth_rejected=self.session.reject,
            **options
        )
        logger.info(f"API client ready on {self.client.current_url}")

        self.rentals = RentalResource(self.client)
        self.equipment = EquipmentResource(self.client)
        self.expenses = ExpenseResource(self.client)
        self.customers = CustomerResource(self.client)
        self.analytics = AnalyticsResource(self.client)
        self.auth = AuthResource(self.client)

        if self.session.token:
            await self.session.verify(self.auth)

    async def login(self, pin_code: str):
        await self.start()
        return await self.session.login(self.auth, pin_code)

    def logout(self):
        self.session.logout()

    def _on_session_event(self, event: SessionEvent, session: AuthSession):
        if event in (SessionEvent.LOGOUT, SessionEvent.AUTH_REJECTED, SessionEvent.LOGIN):
            self.queries.clear()

    def close(self):
        """Tear down the context; the persisted token is left alone."""
        self._unsubscribe()
        self.queries.clear()
        if self.client is not None:
            self.client.close()
