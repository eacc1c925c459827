import asyncio
import logging

import requests
from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from config import settings
from services.proxy_service import (
    CORS_HEADERS,
    PREFLIGHT_HEADERS,
    build_backend_url,
    forward_request,
    strip_prefix,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

MOUNT_PREFIX = settings.proxy_mount_prefix.rstrip("/")


@router.options(MOUNT_PREFIX)
@router.options(MOUNT_PREFIX + "/{path:path}")
async def preflight():
    """Answer CORS preflight requests without contacting the backend"""
    return Response(status_code=status.HTTP_200_OK, headers=PREFLIGHT_HEADERS)


@router.api_route(MOUNT_PREFIX, methods=PROXY_METHODS)
@router.api_route(MOUNT_PREFIX + "/{path:path}", methods=PROXY_METHODS)
async def proxy(request: Request):
    """Forward a request to the backend and mirror its response"""
    backend_path = strip_prefix(request.url.path, MOUNT_PREFIX)
    query = request.url.query
    body = await request.body()

    try:
        result = await asyncio.to_thread(
            forward_request,
            request.method,
            backend_path,
            query,
            request.headers,
            body,
        )
    except requests.exceptions.RequestException as e:
        url = build_backend_url(settings.proxy_backend_url, backend_path, query)
        logger.error(f"Proxy error for {request.method} {url}: {e}")
        details = None
        if e.response is not None:
            details = e.response.text
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            headers={"Access-Control-Allow-Origin": "*"},
            content={
                "error": "Backend connection failed",
                "message": str(e),
                "details": details,
                "url": url,
            },
        )

    return Response(
        content=result.content,
        status_code=result.status_code,
        media_type=result.media_type,
        headers=CORS_HEADERS,
    )
