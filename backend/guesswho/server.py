from __future__ import annotations

from typing import Callable

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config, resolve_async_mode
from .game.catalog import DirectoryPhotoCatalog, PhotoCatalog
from .game.service import GameService
from .game.store import RoomStore
from .game.timers import Scheduler, SocketIOScheduler
from .realtime.broadcast import SocketIOBroadcaster
from .realtime.handlers import MessageDispatcher, register_socketio_handlers
from .realtime.registry import ConnectionRegistry
from .routes.health import bp as health_bp
from .routes.photos import bp as photos_bp
from .routes.rooms import bp as rooms_bp


def create_app(
    config_class: type = Config,
    catalog: PhotoCatalog | None = None,
    scheduler_factory: Callable[[SocketIO], Scheduler] | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = resolve_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", ""))

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    if catalog is None:
        catalog = DirectoryPhotoCatalog(
            app.config.get("PHOTOS_DIR", "photos"),
            url_prefix=app.config.get("PHOTOS_URL_PREFIX", "/photos"),
        )
    scheduler = scheduler_factory(socketio) if scheduler_factory else SocketIOScheduler(socketio)

    service = GameService(
        store=RoomStore(),
        catalog=catalog,
        broadcaster=SocketIOBroadcaster(socketio),
        scheduler=scheduler,
    )
    app.extensions["guesswho"] = service

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(photos_bp, url_prefix="/api")

    register_socketio_handlers(socketio, MessageDispatcher(service, ConnectionRegistry()))

    app.logger.info("[startup] async_mode=%s photos=%d", async_mode, service.catalog_size())
    return app, socketio
