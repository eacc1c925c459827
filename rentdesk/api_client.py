"""
Backend API client with liveness probing and failover.

The client is built in two phases: ``ApiClient.create`` probes the candidate
base URLs and only then returns a client bound to the first live one. Every
call carries the session token as a bearer credential. A connection-level
failure triggers one new probe cycle and, if another backend answers, a
single retry of the failed request against it.
"""

import logging
import socket
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from config import settings
from errors import AuthenticationError, BackendError, ConnectivityError
from services.token_store import TokenStore

logger = logging.getLogger(__name__)


def check_server_health(
    base_url: str,
    timeout: float = None,
    health_path: str = None,
    session: Optional[requests.Session] = None
) -> bool:
    """Probe a backend's health endpoint.

    Args:
        base_url: Backend base URL
        timeout: Probe timeout in seconds, defaults to settings.health_timeout
        health_path: Path to probe, defaults to settings.health_path
        session: Optional requests session to send the probe with

    Returns:
        bool: True only if the backend answered 200 in time
    """
    timeout = timeout or settings.health_timeout
    health_path = health_path or settings.health_path
    http = session or requests

    try:
        response = http.get(f"{base_url}{health_path}", timeout=timeout)
        return response.status_code == 200
    except requests.exceptions.RequestException as e:
        logger.debug(f"Health check failed for {base_url}: {e}")
        return False


def probe_candidates(
    candidates: Sequence[str],
    timeout: float = None,
    health_path: str = None,
    session: Optional[requests.Session] = None
) -> Optional[str]:
    """Return the first candidate that passes the health check, or None."""
    for server in candidates:
        logger.debug(f"Probing {server}")
        if check_server_health(server, timeout, health_path, session):
            return server
    return None


def find_working_server(
    candidates: Sequence[str],
    timeout: float = None,
    health_path: str = None,
    session: Optional[requests.Session] = None
) -> str:
    """Return the first live backend in priority order.

    Falls back to the first candidate when none responds, so later calls
    fail visibly instead of silently.

    Raises:
        ValueError: If no candidates are given
    """
    if not candidates:
        raise ValueError("At least one backend URL is required")

    logger.info("Looking for a live API server...")
    server = probe_candidates(candidates, timeout, health_path, session)
    if server is not None:
        logger.info(f"Found live API server: {server}")
        return server

    logger.warning(f"No API server is reachable, falling back to {candidates[0]}")
    return candidates[0]


class FailoverPolicy:
    """Decides which request errors are worth a failover probe and retry.

    Errors that come with an HTTP response never get here; they are handled
    as backend errors regardless of status.

    Policies:
        any_network_error: every connection failure or timeout
        strict: only refused connections, DNS failures and timeouts
    """

    POLICIES = ("any_network_error", "strict")

    REFUSED_MARKERS = (
        "connection refused",
        "actively refused",
        "name or service not known",
        "nodename nor servname",
        "failed to resolve",
        "getaddrinfo failed",
        "temporary failure in name resolution",
    )

    def __init__(self, name: str = "any_network_error"):
        if name not in self.POLICIES:
            raise ValueError(f"Unknown failover policy '{name}'. Use one of {self.POLICIES}")
        self.name = name

    def is_failover_eligible(self, error: Exception) -> bool:
        if isinstance(error, requests.exceptions.Timeout):
            return True
        if not isinstance(error, requests.exceptions.ConnectionError):
            return False
        if self.name == "any_network_error":
            return True
        return self._is_refused_or_unresolved(error)

    def _is_refused_or_unresolved(self, error: BaseException) -> bool:
        seen = set()
        current = error
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            if isinstance(current, (ConnectionRefusedError, socket.gaierror)):
                return True
            current = current.__cause__ or current.__context__

        message = str(error).lower()
        return any(marker in message for marker in self.REFUSED_MARKERS)


class ApiClient:
    """HTTP client for the rental backend.

    Use ``ApiClient.create`` to build a client bound to a live backend.
    """

    def __init__(
        self,
        base_url: str,
        candidates: Optional[Sequence[str]] = None,
        token_store: Optional[TokenStore] = None,
        on_auth_rejected: Optional[Callable[[], None]] = None,
        timeout: float = None,
        health_timeout: float = None,
        health_path: str = None,
        failover_policy: Optional[FailoverPolicy] = None,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.candidates: List[str] = list(candidates or [self.base_url])
        self.token_store = token_store
        self.on_auth_rejected = on_auth_rejected
        self.timeout = timeout or settings.request_timeout
        self.health_timeout = health_timeout or settings.health_timeout
        self.health_path = health_path or settings.health_path
        self.failover_policy = failover_policy or FailoverPolicy(settings.failover_policy)

        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

        self._failover_lock = threading.Lock()

    @classmethod
    def create(cls, candidates: Sequence[str] = None, **kwargs) -> "ApiClient":
        """Probe the candidates and return a client bound to the live one.

        Args:
            candidates: Backend base URLs in priority order, defaults to
                settings.candidate_servers
            **kwargs: Passed through to the constructor

        Returns:
            ApiClient: Ready-to-use client
        """
        candidates = list(candidates or settings.candidate_servers)
        base_url = find_working_server(
            candidates,
            timeout=kwargs.get("health_timeout"),
            health_path=kwargs.get("health_path"),
            session=kwargs.get("session"),
        )
        return cls(base_url, candidates=candidates, **kwargs)

    @property
    def current_url(self) -> str:
        return self.base_url

    def switch_to_server(self, server_url: str):
        """Force the client onto a specific backend if it is live.

        Raises:
            ConnectivityError: If the backend does not pass the health check
        """
        server_url = server_url.rstrip("/")
        if not check_server_health(server_url, self.health_timeout, self.health_path, self.session):
            logger.error(f"Server {server_url} is not available")
            raise ConnectivityError(f"Server {server_url} is not available", url=server_url)

        self.base_url = server_url
        logger.info(f"Switched to API server {server_url}")

    def _headers(self) -> Dict[str, str]:
        token = self.token_store.get() if self.token_store else None
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request to the current backend.

        Args:
            method: HTTP method
            path: Path below the base URL, e.g. "/rentals"
            **kwargs: Passed to requests (params, json, ...)

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            AuthenticationError: On HTTP 401; the session is ended first
            BackendError: On any other error status
            ConnectivityError: When no backend answered
        """
        return self._send(method.upper(), path, kwargs, allow_failover=True)

    def _send(self, method: str, path: str, kwargs: dict, allow_failover: bool) -> Any:
        base_url = self.base_url
        url = f"{base_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            if allow_failover and self.failover_policy.is_failover_eligible(e):
                logger.warning(f"Server {base_url} is unreachable, looking for an alternative: {e}")
                if self._failover(base_url):
                    return self._send(method, path, kwargs, allow_failover=False)
            else:
                logger.error(f"Request {method} {url} failed: {e}")
            raise ConnectivityError(f"Backend unreachable: {e}", url=url) from e

        return self._handle_response(response, url)

    def _failover(self, failed_url: str) -> bool:
        """Move to another live backend after failed_url stopped answering.

        Returns:
            bool: True if the client now points at a different backend
        """
        with self._failover_lock:
            if self.base_url != failed_url:
                # Another request already failed over
                return True

            new_url = probe_candidates(
                self.candidates,
                timeout=self.health_timeout,
                health_path=self.health_path,
                session=self.session,
            )
            if new_url is None:
                logger.error("No API server answered the health check")
                return False
            if new_url == failed_url:
                return False

            logger.info(f"Switching API server from {failed_url} to {new_url}")
            self.base_url = new_url
            return True

    def _handle_response(self, response: requests.Response, url: str) -> Any:
        if response.status_code == 401:
            logger.warning(f"Authentication rejected for {url}")
            if self.token_store:
                self.token_store.clear()
            if self.on_auth_rejected:
                self.on_auth_rejected()
            raise AuthenticationError(self._error_detail(response) or "Authentication required")

        if not response.ok:
            detail = self._error_detail(response)
            logger.error(f"Backend error {response.status_code} for {url}: {detail}")
            raise BackendError(response.status_code, detail, url=url)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_detail(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or None

    def get(self, path: str, params: Optional[Dict] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def close(self):
        """Close the underlying HTTP session."""
        self.session.close()


class BaseResource:
    """Base class for typed wrappers over one backend collection.

    Subclasses set ``resource`` (the cache key prefix), ``path`` and the
    extra cache prefixes their writes make stale.
    """

    resource: str = ""
    path: str = ""
    invalidates_also: tuple = ()

    def __init__(self, client: ApiClient):
        self.client = client

    def key(self, *params) -> tuple:
        """Cache key for a read on this resource."""
        return (self.resource,) + tuple(params)

    @property
    def invalidates(self) -> List[tuple]:
        """Cache prefixes to drop after a successful write."""
        return [(self.resource,)] + [(prefix,) for prefix in self.invalidates_also]

    def item_path(self, item_id: int) -> str:
        return f"{self.path}/{item_id}"
