"""
FastAPI adapter for the guard chain.

Upstream authentication stores a Principal on ``request.state.principal``
(see PrincipalMiddleware). ``authorize(*guards)`` builds a dependency that
snapshots the request into a RequestContext and runs the chain.
"""
from __future__ import annotations

import inspect
import json
from collections.abc import Awaitable, Callable, Mapping
from typing import Any
from urllib.parse import parse_qsl

from fastapi import Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from .config import Settings, get_settings
from .errors import Unauthenticated
from .middleware.guards import Guard, GuardChain, RequestContext
from .models.principal import Principal

PrincipalLoader = Callable[[Request], "Principal | None | Awaitable[Principal | None]"]

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class PrincipalMiddleware(BaseHTTPMiddleware):
    """Attach the upstream-authenticated principal to every request.

    The loader owns token/session verification; returning None leaves the
    request anonymous. Coroutine loaders are awaited, plain callables run in
    the threadpool so blocking session or database lookups stay off the
    event loop.
    """

    def __init__(self, app, principal_loader: PrincipalLoader):
        super().__init__(app)
        self.principal_loader = principal_loader

    async def load_principal(self, request: Request) -> Principal | None:
        if inspect.iscoroutinefunction(self.principal_loader):
            return await self.principal_loader(request)
        return await run_in_threadpool(self.principal_loader, request)

    async def dispatch(self, request: Request, call_next):
        request.state.principal = await self.load_principal(request)
        return await call_next(request)


def get_current_principal_optional(request: Request) -> Principal | None:
    principal = getattr(request.state, "principal", None)
    return principal if isinstance(principal, Principal) else None


def get_current_principal(
    principal: Principal | None = Depends(get_current_principal_optional),
) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal


async def _read_body(request: Request) -> Mapping[str, Any]:
    """Best-effort snapshot of the request body as a flat mapping.

    JSON objects and url-encoded forms are read; anything else (multipart,
    JSON arrays, undecodable bytes) is treated as an empty body.
    """
    if request.method in {"GET", "HEAD", "OPTIONS"}:
        return {}
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type and _FORM_CONTENT_TYPE not in content_type:
        return {}
    raw = await request.body()
    if not raw:
        return {}
    try:
        if _FORM_CONTENT_TYPE in content_type:
            return dict(
                parse_qsl(raw.decode("utf-8"), keep_blank_values=True, errors="strict")
            )
        payload = json.loads(raw)
    except ValueError:
        # JSONDecodeError and UnicodeDecodeError both land here
        return {}
    return payload if isinstance(payload, dict) else {}


async def build_request_context(request: Request) -> RequestContext:
    return RequestContext(
        principal=get_current_principal_optional(request),
        route_params=dict(request.path_params),
        body=await _read_body(request),
        query=dict(request.query_params),
        method=request.method,
        path=request.url.path,
    )


def authorize(*guards: Guard) -> Callable:
    """
    Build a route dependency enforcing ``guards`` in order.

    Usage:
        @router.post("/courses", dependencies=[Depends(authorize(
            RequireAuthenticated(), RequirePermission("courses:create"),
        ))])
    """
    async def dependency(
        request: Request,
        settings: Settings = Depends(get_settings),
    ) -> None:
        chain = GuardChain(*guards, log_denials=settings.log_denials)
        chain.run(await build_request_context(request))

    return dependency
