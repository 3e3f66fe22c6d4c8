import logging
from collections.abc import Iterable

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .dependencies import PrincipalLoader, PrincipalMiddleware
from .errors import AppError, AuthorizationDenied, error_payload
from .routers import permissions

logger = logging.getLogger("kaido")


def _resolve_log_level(value: str) -> int:
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: Settings) -> None:
    log_level = _resolve_log_level(settings.log_level)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(log_level)


def _log_error(request: Request, status_code: int, code: str, message: str) -> None:
    request_id = request.headers.get("x-request-id")
    logger.warning(
        f"[{code}] status={status_code} path={request.url.path} "
        f"request_id={request_id or 'n/a'} message={message}"
    )


async def handle_authorization_denied(
    request: Request, exc: AuthorizationDenied
) -> JSONResponse:
    # The guard chain has already logged the denial
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    _log_error(request, exc.status_code, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.code, exc.message, exc.details),
    )


def create_app(
    principal_loader: PrincipalLoader | None = None,
    routers: Iterable[APIRouter] = (),
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application.

    ``principal_loader`` is the upstream authentication hook; without one
    every request is anonymous. Extra ``routers`` are mounted after the
    built-in permission introspection routes.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.dependency_overrides[get_settings] = lambda: settings

    if principal_loader is not None:
        app.add_middleware(PrincipalMiddleware, principal_loader=principal_loader)

    app.add_exception_handler(AuthorizationDenied, handle_authorization_denied)
    app.add_exception_handler(AppError, handle_app_error)

    app.include_router(permissions.router)
    for router in routers:
        app.include_router(router)

    if settings.debug:
        logger.warning("DEBUG=true, do not use in production")

    return app
