from __future__ import annotations

import os
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.service import RoomRegistry
from .game.store import JsonFileRoomStore, MemoryRoomStore
from .game.timers import TaskScheduler
from .routes.admin import bp as admin_bp
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .routes.scenarios import bp as scenarios_bp
from .realtime.handlers import register_socketio_handlers
from .utils.web import REGISTRY_EXTENSION


def _default_async_mode() -> str:
    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        return env_async_mode
    # Windows and Python >= 3.13: threading (eventlet has known compatibility issues there)
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(
    config: type | None = None,
    registry: RoomRegistry | None = None,
    async_mode: str | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config or Config)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode or _default_async_mode(),
    )

    if registry is None:
        rooms_file = app.config.get("ROOMS_FILE", "")
        store = JsonFileRoomStore(rooms_file) if rooms_file else MemoryRoomStore()
        registry = RoomRegistry(
            store=store,
            scheduler=TaskScheduler(start_task=socketio.start_background_task, sleep=socketio.sleep),
            grace_period_sec=app.config.get("DISCONNECT_GRACE_SEC"),
            code_length=app.config.get("ROOM_CODE_LENGTH"),
        )
    app.extensions[REGISTRY_EXTENSION] = registry

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(scenarios_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api")

    register_socketio_handlers(socketio, registry)

    return app, socketio
