"""
REST shell.

One Starlette route per registry operation, plus service info at "/" and a
generated OpenAPI document at "/openapi.json". GET routes read query
parameters, POST routes read a JSON object body. Everything else is the
shared Dispatcher.
"""

import json
import logging
from typing import Any, Dict, List, Mapping

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from creatordb_proxy.classifier import NormalizedResult
from creatordb_proxy.config import ProxyConfig
from creatordb_proxy.dispatch import Dispatcher
from creatordb_proxy.middleware import RequestLoggingMiddleware
from creatordb_proxy.openapi import build_openapi
from creatordb_proxy.registry import REGISTRY, Operation

logger = logging.getLogger(__name__)

PLATFORMS = ["instagram", "youtube", "tiktok"]


def http_status_for(result: NormalizedResult) -> int:
    """
    Map a result to the REST response status.

    Upstream 4xx/5xx codes are kept. A failure that arrived with a 2xx
    status (body flagged success: false) becomes 502.
    """
    if result.success:
        return 200
    if result.status is not None and result.status >= 400:
        return result.status
    return 502


def _error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        {"success": False, "error": message, "status": status_code},
        status_code=status_code
    )


async def _read_arguments(request: Request, operation: Operation) -> Dict[str, Any]:
    if operation.http_method == "GET":
        return dict(request.query_params)

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def make_endpoint(operation: Operation, dispatcher: Dispatcher):
    """Create the Starlette endpoint for one operation"""

    async def endpoint(request: Request) -> JSONResponse:
        try:
            args = await _read_arguments(request, operation)
        except ValueError as e:
            logger.warning(f"{operation.name}: rejected request body: {e}")
            return _error_response(str(e))

        result = await dispatcher.dispatch(operation.name, args)
        status_code = http_status_for(result)
        if not result.success:
            logger.warning(
                f"{operation.name} failed ({result.error_kind}, status={result.status}): {result.error}"
            )
        return JSONResponse(result.to_dict(), status_code=status_code)

    endpoint.__name__ = operation.name
    return endpoint


def create_http_app(
    dispatcher: Dispatcher,
    config: ProxyConfig,
    registry: Mapping[str, Operation] = REGISTRY
) -> Starlette:
    """
    Build the REST application.

    Args:
        dispatcher: Shared dispatcher the routes delegate to
        config: Proxy configuration (service info, CORS origins)
        registry: Operations to expose

    Returns:
        Starlette application
    """
    openapi_document = build_openapi(
        title=config.name,
        version=config.version,
        description=config.description,
        registry=registry,
    )

    async def service_info(request: Request) -> JSONResponse:
        return JSONResponse({
            "name": config.name,
            "description": config.description,
            "version": config.version,
            "openapi": "/openapi.json",
            "platforms": PLATFORMS,
            "operations": len(registry),
        })

    async def openapi_json(request: Request) -> JSONResponse:
        return JSONResponse(openapi_document)

    routes: List[Route] = [
        Route("/", service_info, methods=["GET"]),
        Route("/openapi.json", openapi_json, methods=["GET"]),
    ]
    for operation in registry.values():
        routes.append(
            Route(
                operation.route,
                make_endpoint(operation, dispatcher),
                methods=[operation.http_method],
            )
        )
        logger.debug(f"Route registered: {operation.http_method} {operation.route} -> {operation.name}")

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=config.http.cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        ),
        Middleware(RequestLoggingMiddleware),
    ]

    logger.info(f"REST app created with {len(registry)} operation routes")
    return Starlette(routes=routes, middleware=middleware)
