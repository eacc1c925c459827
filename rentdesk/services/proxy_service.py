"""
Forwarding logic for the backend reverse proxy.

The static frontend cannot call the plain-HTTP backend directly (mixed
content and CORS), so its requests arrive at the proxy under a mount prefix
and are replayed against the real backend here.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import requests

from config import settings

logger = logging.getLogger(__name__)

# Only these request headers reach the backend; routing headers added by
# the hosting platform are dropped.
FORWARDED_HEADERS = {
    "authorization": "Authorization",
    "content-type": "Content-Type",
}

BODY_METHODS = ("POST", "PUT", "PATCH")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
}

PREFLIGHT_HEADERS = {**CORS_HEADERS, "Access-Control-Max-Age": "86400"}


@dataclass
class ProxyResult:
    status_code: int
    content: bytes
    media_type: str


def strip_prefix(path: str, prefix: str) -> str:
    """
    Remove the mount prefix from an incoming path.

    Handles:
    - "/.netlify/functions/api/rentals" -> "/rentals"
    - "/.netlify/functions/api" -> ""
    - "/rentals" (no prefix) -> "/rentals"
    """
    prefix = prefix.rstrip("/")
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        return path[len(prefix):]
    return path


def build_backend_url(backend_url: str, path: str, query: str = "") -> str:
    url = f"{backend_url.rstrip('/')}{path}"
    if query:
        url = f"{url}?{query}"
    return url


def filter_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Keep only the headers the backend needs."""
    forwarded = {}
    for name, value in headers.items():
        canonical = FORWARDED_HEADERS.get(name.lower())
        if canonical:
            forwarded[canonical] = value
    return forwarded


def forward_request(
    method: str,
    path: str,
    query: str,
    headers: Mapping[str, str],
    body: Optional[bytes],
    backend_url: str = None,
    timeout: float = None
) -> ProxyResult:
    """Replay one request against the backend and mirror its answer.

    Args:
        method: HTTP method of the incoming request
        path: Path below the backend base URL, prefix already stripped
        query: Raw query string, passed through untouched
        headers: Incoming request headers
        body: Raw request body
        backend_url: Backend base URL, defaults to settings.proxy_backend_url
        timeout: Timeout in seconds, defaults to settings.proxy_timeout

    Returns:
        ProxyResult with the backend's status, body and content type

    Raises:
        requests.exceptions.RequestException: If the backend is unreachable
    """
    backend_url = backend_url or settings.proxy_backend_url
    timeout = timeout or settings.proxy_timeout
    url = build_backend_url(backend_url, path, query)
    method = method.upper()

    logger.info(f"Proxying {method} {url}")
    response = requests.request(
        method,
        url,
        headers=filter_headers(headers),
        data=body if body and method in BODY_METHODS else None,
        timeout=timeout,
    )
    logger.info(f"Backend response: {response.status_code}")

    return ProxyResult(
        status_code=response.status_code,
        content=response.content,
        media_type=response.headers.get("content-type") or "application/json",
    )
