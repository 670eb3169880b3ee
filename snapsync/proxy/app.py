"""FastAPI application for the rotating-credential storage proxy."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from snapsync.config.settings import ProxySettings
from snapsync.proxy.cache import ProxyResponse, ResponseCache
from snapsync.proxy.github_backend import GitHubContentsBackend
from snapsync.proxy.quota import QuotaTracker
from snapsync.proxy.service import RotatingProxy

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,HEAD,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _to_response(result: ProxyResponse) -> Response:
    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.media_type,
        headers=result.headers,
    )


def build_proxy(
    settings: ProxySettings,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], float] | None = None,
) -> RotatingProxy:
    """Wire a RotatingProxy with its own quota tracker and response cache."""
    client = httpx.AsyncClient(
        base_url=settings.github_api_base_url,
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
    )
    backend = GitHubContentsBackend(
        client,
        owner=settings.github_owner,
        repo=settings.github_repo,
        branch=settings.github_branch,
        user_agent=settings.user_agent,
    )
    clock_kwargs = {"clock": clock} if clock is not None else {}
    return RotatingProxy(
        settings.github_tokens,
        backend,
        QuotaTracker(fresh_seconds=settings.quota_fresh_seconds, **clock_kwargs),
        ResponseCache(max_entries=settings.cache_max_entries, **clock_kwargs),
        image_cache_seconds=settings.image_cache_seconds,
        listing_cache_seconds=settings.listing_cache_seconds,
    )


def create_app(settings: ProxySettings, proxy: RotatingProxy | None = None) -> FastAPI:
    """Build the proxy app. Each app owns one RotatingProxy in ``app.state.proxy``."""
    proxy = proxy or build_proxy(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await proxy.close()

    app = FastAPI(title="snapsync proxy", lifespan=lifespan)
    app.state.proxy = proxy

    @app.middleware("http")
    async def _add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response

    @app.options("/{full_path:path}")
    async def preflight(full_path: str) -> Response:
        return Response(status_code=200)

    @app.get("/stats")
    async def stats() -> JSONResponse:
        return JSONResponse(await proxy.stats())

    @app.post("/upload")
    async def upload(request: Request, path: str | None = None) -> Response:
        if not path:
            return PlainTextResponse("Missing path", status_code=400)
        body = await request.body()
        return _to_response(await proxy.write(path, body))

    @app.api_route("/", methods=["GET", "HEAD"])
    async def read(request: Request, path: str | None = None) -> Response:
        if not path:
            return PlainTextResponse("Missing path", status_code=400)
        return _to_response(await proxy.read(path, str(request.url)))

    return app
