import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER

from odds_mcp.api.routes.mcp import McpEndpoint
from odds_mcp.config import Settings, settings
from odds_mcp.providers.base import ProviderInterface
from odds_mcp.services.metrics import metrics_service
from odds_mcp.services.odds_client import OddsAPIClient
from odds_mcp.sessions.manager import SessionManager
from odds_mcp.sessions.transport import SessionTransport
from odds_mcp.tools.registry import ToolRegistry

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

PUBLIC_PATHS = ("/health", "/docs", "/openapi.json", "/redoc")


def create_session_manager(config: Settings, registry: ToolRegistry) -> SessionManager:
    def transport_factory(session_id: str) -> SessionTransport:
        return SessionTransport(
            session_id,
            json_response=config.mcp_json_response,
            close_timeout=config.session_close_timeout_seconds,
        )

    return SessionManager(
        registry.build_server,
        transport_factory=transport_factory,
        idle_timeout=config.session_idle_timeout_seconds,
        reap_interval=config.session_reap_interval_seconds,
    )


def create_app(
    config: Settings = settings,
    *,
    provider: ProviderInterface | None = None,
    session_manager: SessionManager | None = None,
) -> FastAPI:
    registry = ToolRegistry.from_settings(provider if provider is not None else OddsAPIClient(), config)
    manager = session_manager if session_manager is not None else create_session_manager(config, registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        config.require_odds_api_key()
        logger.info(f"Starting {config.server_name} on http://{config.host}:{config.port}")
        logger.info(f"MCP endpoint: http://{config.host}:{config.port}/mcp")
        logger.info(f"Health check: http://{config.host}:{config.port}/health")
        await manager.start()
        yield
        # Shutdown
        logger.info("Shutting down server...")
        await manager.stop()
        logger.info("Server shutdown complete")

    app = FastAPI(
        title=config.server_name,
        description="MCP server exposing sports odds and player props from The Odds API",
        version=config.server_version,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.session_manager = manager

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key", MCP_SESSION_ID_HEADER],
        expose_headers=[MCP_SESSION_ID_HEADER],
    )

    # API Key authentication middleware
    @app.middleware("http")
    async def api_key_middleware(request: Request, call_next):
        """Validate API key if enabled."""
        if request.url.path in PUBLIC_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        if not config.api_key_enabled or not config.api_key:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key")
        if api_key != config.api_key:
            return JSONResponse(
                status_code=401,
                content={"error": "UNAUTHORIZED", "message": "Invalid or missing API key"},
            )

        return await call_next(request)

    # Metrics middleware
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Track request metrics."""
        if request.url.path in ("/health", "/metrics"):
            return await call_next(request)

        start_time = time.time()
        await metrics_service.track_request()

        response = await call_next(request)

        latency_ms = (time.time() - start_time) * 1000
        await metrics_service.track_latency(latency_ms)

        if response.status_code >= 400:
            await metrics_service.track_error()

        return response

    app.add_route(
        "/mcp",
        McpEndpoint(manager, request_timeout=config.request_timeout_seconds),
        methods=["GET", "POST", "DELETE"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": config.server_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/metrics")
    async def get_metrics():
        """Get server metrics (requests, sessions, tool calls, provider usage)."""
        return await metrics_service.get_metrics(active_sessions=len(manager))

    @app.post("/metrics/reset")
    async def reset_metrics():
        """Reset all metrics counters."""
        await metrics_service.reset()
        return {"status": "reset"}

    return app


app = create_app()
