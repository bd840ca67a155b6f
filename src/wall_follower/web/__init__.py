"""
Web Layer - Debug interface.

Provides:
- Controller status (REST + WebSocket)
- LIDAR bird's eye view (MJPEG)
- Read-only parameter view
- Stop button
"""

from .server import create_app, run_server

__all__ = ["create_app", "run_server"]
