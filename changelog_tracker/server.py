"""
Read-only HTTP API over the stored document.

Serves the current document verbatim at ``GET /api/updates`` so
dashboards can poll it. Nothing here writes to the store.
"""

import asyncio

import structlog
from aiohttp import web

from .core.store import JsonStore

logger = structlog.get_logger(__name__)

STORE_KEY = web.AppKey("store", JsonStore)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Answer preflight requests and add CORS headers to every response."""
    if request.method == "OPTIONS":
        return web.Response(status=200, headers=CORS_HEADERS)
    response = await handler(request)
    response.headers.update(CORS_HEADERS)
    return response


async def handle_updates(request: web.Request) -> web.Response:
    """Return the stored document as-is."""
    store = request.app[STORE_KEY]
    try:
        body = store.read_raw()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("document_read_failed", path=str(store.path), error=str(e))
        return web.json_response({"error": "Failed to load updates"}, status=500)

    return web.Response(text=body, content_type="application/json")


async def handle_health(request: web.Request) -> web.Response:
    """Health check."""
    return web.Response(text="OK", status=200)


def create_app(store: JsonStore) -> web.Application:
    """
    Build the read API application.

    Args:
        store: Store whose document is served

    Returns:
        aiohttp Application
    """
    app = web.Application(middlewares=[cors_middleware])
    app[STORE_KEY] = store

    app.router.add_get("/api/updates", handle_updates)
    app.router.add_get("/health", handle_health)

    return app


async def start_server(store: JsonStore, host: str = "0.0.0.0", port: int = 3000) -> None:
    """Start the read API and serve until cancelled."""
    app = create_app(store)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info("server_started", url=f"http://{host}:{port}/", data_file=str(store.path))

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()

