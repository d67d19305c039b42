"""
Health Server
Liveness responder for uptime checks, served next to the poll loop
"""

import logging
from typing import Optional

from aiohttp import web

logger = logging.getLogger(__name__)

HEALTH_PATH = "/healthz"


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="ok", content_type="text/plain")


async def handle_default(request: web.Request) -> web.Response:
    return web.Response(text="running", content_type="text/plain")


def create_app() -> web.Application:
    """Application answering "ok" on /healthz and "running" everywhere else"""
    app = web.Application()
    app.router.add_route("*", HEALTH_PATH, handle_health)
    app.router.add_route("*", "/{tail:.*}", handle_default)
    return app


class HealthServer:
    """Runs the health application on the current event loop"""

    def __init__(self, host: str = "0.0.0.0", port: int = 10000):
        self.host = host
        self.port = port
        self._runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        self._runner = web.AppRunner(create_app(), access_log=None)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"🩺 HTTP server listening on :{self.port}")

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.debug("Health server stopped")
