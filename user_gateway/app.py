from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from loguru import logger

from user_gateway.config import USER_ECHO_SERVICE_ID, AppConfig, Environment
from user_gateway.errors import DownstreamError
from user_gateway.routers import user
from user_gateway.services.username_fetcher import (
    StaticUsernameFetcher,
    UserEchoClient,
    UsernameFetcher,
)


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    service = config.service(USER_ECHO_SERVICE_ID)
    return httpx.AsyncClient(
        base_url=service.base_url,
        timeout=httpx.Timeout(service.timeout, connect=service.connect_timeout),
        verify=service.verify_ssl,
    )


async def _downstream_error_handler(
    request: Request, exc: DownstreamError
) -> PlainTextResponse:
    logger.error("✗ {} {} via {}: {}", request.method, request.url.path, exc.service, exc)
    return PlainTextResponse(f"Downstream error: {exc}", status_code=502)


def create_app(
    config: AppConfig,
    username_fetcher: UsernameFetcher | None = None,
) -> FastAPI:
    """Build the gateway.

    The username fetcher is chosen here, once: the ``test`` environment gets
    the static substitute, every other environment talks to ``userecho``.
    An explicit ``username_fetcher`` overrides both.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.config = config
        http_client = None
        if username_fetcher is not None:
            app.state.username_fetcher = username_fetcher
        elif config.environment is Environment.TEST:
            app.state.username_fetcher = StaticUsernameFetcher()
        else:
            http_client = build_http_client(config)
            app.state.username_fetcher = UserEchoClient(http_client)
        logger.info(
            "Username lookups served by {} ({} environment)",
            type(app.state.username_fetcher).__name__,
            config.environment.value,
        )
        try:
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()

    app = FastAPI(
        title="user-gateway",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )
    app.add_exception_handler(DownstreamError, _downstream_error_handler)
    app.include_router(user.router)

    return app
