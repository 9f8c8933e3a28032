from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from claimledger import __version__
from claimledger.core.config import Settings, settings
from claimledger.core.errors import ClaimLedgerError
from claimledger.core.logger import get_logger, quiet_libraries
from claimledger.core.observability import setup_tracing
from claimledger.routers.agent import router as agent_router
from claimledger.routers.system import router as system_router
from claimledger.routers.verification import router as verification_router
from claimledger.services.container import ServiceContainer, build_services

logger = get_logger(__name__)


async def handle_service_error(request: Request, exc: ClaimLedgerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"[Main] {request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"[Main] {request.method} {request.url.path} rejected: {exc}")
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors())
    return JSONResponse({"error": f"Invalid request body: {details}"}, status_code=400)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"[Main] Unhandled error in {request.method} {request.url.path}: {exc}")
    return JSONResponse({"error": str(exc)}, status_code=500)


def create_app(services: Optional[ServiceContainer] = None, config: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    When `services` is None the service graph is built from `config` at
    startup; a missing evidence-provider credential aborts startup.
    """
    config = config or settings
    quiet_libraries()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            app.state.services = build_services(config)
        logger.info(f"[Main] claimledger {__version__} ready on {config.HOST}:{config.PORT}")
        try:
            yield
        finally:
            await app.state.services.aclose()
            logger.info("[Main] Services closed")

    app = FastAPI(title="claimledger", version=__version__, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ClaimLedgerError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(verification_router, tags=["Verification"])
    app.include_router(agent_router, tags=["Agent"])
    app.include_router(system_router, tags=["System"])

    if config.ENABLE_TRACING:
        setup_tracing(app)

    return app


app = create_app()
