"""
Web server - aiohttp application for debug interface.
"""

import asyncio
import logging

from aiohttp import web

from wall_follower.config import WEB_HOST, WEB_PORT, WEB_STREAM_HZ

logger = logging.getLogger(__name__)

INDEX_HTML = """<!DOCTYPE html>
<html>
<head><title>Wall Follower</title></head>
<body>
    <h1>Wall Follower Debug Interface</h1>
    <img src="/stream/lidar" width="500" height="500">
    <pre id="status">connecting...</pre>
    <button onclick="fetch('/api/stop', {method: 'POST'})">Stop</button>
    <nav>
        <a href="/api/status">Status</a> |
        <a href="/api/params">Parameters</a>
    </nav>
    <script>
        const ws = new WebSocket(`ws://${location.host}/ws/state`);
        ws.onmessage = (e) => {
            document.getElementById("status").textContent =
                JSON.stringify(JSON.parse(e.data), null, 2);
        };
    </script>
</body>
</html>
"""


class WebServer:
    """
    Debug web interface server.

    Provides:
    - Dashboard page
    - Controller status (REST + WebSocket)
    - Read-only parameters
    - LIDAR bird's eye stream (MJPEG)
    - Stop button
    """

    def __init__(self, controller=None):
        """
        Args:
            controller: Optional Controller instance for live data
        """
        self.controller = controller
        self.app = web.Application()
        self._setup_routes()

    def _setup_routes(self):
        """Configure routes."""
        self.app.router.add_get("/", self.index)

        # API
        self.app.router.add_get("/api/status", self.api_status)
        self.app.router.add_get("/api/params", self.api_params)
        self.app.router.add_post("/api/stop", self.api_stop)

        # Streams
        self.app.router.add_get("/stream/lidar", self.stream_lidar)

        # WebSocket
        self.app.router.add_get("/ws/state", self.ws_state)

    async def index(self, request):
        """Dashboard page."""
        return web.Response(text=INDEX_HTML, content_type="text/html")

    async def api_status(self, request):
        """Get current controller status."""
        if not self.controller:
            return web.json_response({"error": "Controller not available"}, status=404)
        return web.json_response(self.controller.status())

    async def api_params(self, request):
        """Get parameters (read-only while running)."""
        if self.controller and self.controller.params:
            return web.json_response(self.controller.params.to_dict())
        return web.json_response({"error": "Parameters not available"}, status=404)

    async def api_stop(self, request):
        """POST /api/stop - End the control loop (base is stopped on cleanup)."""
        if not self.controller:
            return web.json_response({"error": "Controller not available"}, status=404)
        self.controller.stop()
        return web.json_response({"ok": True})

    async def stream_lidar(self, request):
        """MJPEG stream of the bird's eye view."""
        response = web.StreamResponse()
        response.content_type = "multipart/x-mixed-replace; boundary=frame"
        await response.prepare(request)

        try:
            while True:
                if self.controller:
                    jpeg = self.controller.render_jpeg()
                    if jpeg:
                        await response.write(
                            b"--frame\r\n"
                            b"Content-Type: image/jpeg\r\n\r\n"
                            + jpeg
                            + b"\r\n"
                        )
                await asyncio.sleep(1.0 / WEB_STREAM_HZ)
        except (ConnectionResetError, ConnectionAbortedError):
            pass
        except Exception as e:
            logger.error(f"LIDAR stream error: {e}")

        return response

    async def ws_state(self, request):
        """WebSocket streaming controller status."""
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        logger.info("State WebSocket connected")

        try:
            while not ws.closed:
                if self.controller:
                    await ws.send_json(self.controller.status())
                await asyncio.sleep(1.0 / WEB_STREAM_HZ)
        except (ConnectionResetError, ConnectionAbortedError):
            pass
        except Exception as e:
            logger.error(f"State WebSocket error: {e}")
        finally:
            logger.info("State WebSocket disconnected")

        return ws


def create_app(controller=None) -> web.Application:
    """Create the web application."""
    server = WebServer(controller)
    return server.app


async def run_server(controller=None, host=WEB_HOST, port=WEB_PORT):
    """Run the web server."""
    app = create_app(controller)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Web server running at http://{host}:{port}")
    return runner
