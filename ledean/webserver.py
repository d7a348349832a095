"""HTTP server for the websocket endpoint, the exit call and the frontend files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Awaitable, Callable

from aiohttp import web

from ledean.hub import Hub

log = logging.getLogger(__name__)

EXIT_CALLBACK = web.AppKey("exit_callback", Callable[[], None])

_CORS_METHODS = frozenset({"GET", "POST", "HEAD"})

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _exit_process() -> None:
    os._exit(0)


@web.middleware
async def _cors(request: web.Request, handler: Handler) -> web.StreamResponse:
    origin = request.headers.get("Origin")
    if (
        request.method == "OPTIONS"
        and origin is not None
        and "Access-Control-Request-Method" in request.headers
    ):
        method = request.headers["Access-Control-Request-Method"].upper()
        headers = {"Vary": "Origin, Access-Control-Request-Method, Access-Control-Request-Headers"}
        if method in _CORS_METHODS:
            headers["Access-Control-Allow-Origin"] = "*"
            headers["Access-Control-Allow-Methods"] = method
            requested = request.headers.get("Access-Control-Request-Headers")
            if requested:
                headers["Access-Control-Allow-Headers"] = requested
        return web.Response(status=204, headers=headers)
    response = await handler(request)
    if origin is not None and not response.prepared:
        response.headers["Vary"] = "Origin"
        response.headers["Access-Control-Allow-Origin"] = "*"
    return response


async def _exit(request: web.Request) -> web.StreamResponse:
    log.info("Exit api was called. Shutting down LEDean")
    response = web.Response(body=b"", content_type="application/json")
    await response.prepare(request)
    await response.write_eof()
    request.app[EXIT_CALLBACK]()
    return response


def _frontend(root: Path) -> Handler:
    root = root.resolve()

    async def serve(request: web.Request) -> web.StreamResponse:
        target = (root / request.match_info["tail"]).resolve()
        try:
            target.relative_to(root)
        except ValueError:
            raise web.HTTPNotFound() from None
        if target.is_dir():
            target = target / "index.html"
        if not target.is_file():
            raise web.HTTPNotFound()
        return web.FileResponse(target)

    return serve


def create_app(hub: Hub, path2frontend: str | os.PathLike | None) -> web.Application:
    """Build the application; an empty frontend path serves no static files."""
    app = web.Application(middlewares=[_cors])
    app[EXIT_CALLBACK] = _exit_process
    app.router.add_route("*", "/exit", _exit)
    app.router.add_get("/ws", hub.websocket_handler)
    if path2frontend:
        app.router.add_get("/{tail:.*}", _frontend(Path(path2frontend)))
    return app


def start(address: str, port: int, path2frontend: str | None, hub: Hub) -> None:
    """Serve until the process ends; an empty address listens on every interface."""
    web.run_app(
        create_app(hub, path2frontend),
        host=address or None,
        port=port,
        print=None,
        handle_signals=False,
    )