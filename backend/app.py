import logging

import os

from pathlib import Path

from dotenv import load_dotenv


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # Config reads the environment at import time, so import it after load_dotenv.
    try:
        from backend.guesswho.config import Config, resolve_async_mode
    except ImportError:  # pragma: no cover
        from guesswho.config import Config, resolve_async_mode

    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if resolve_async_mode(Config.SOCKETIO_ASYNC_MODE) == "eventlet":
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.guesswho.server import create_app
    except ImportError:  # pragma: no cover
        from guesswho.server import create_app

    app, socketio = create_app()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3001"))
    debug = os.environ.get("FLASK_DEBUG", "1") == "1"

    allow_unsafe_werkzeug = os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1"
    use_reloader = os.environ.get("FLASK_USE_RELOADER", "0") == "1"

    socketio.run(
        app,
        host=host,
        port=port,
        debug=debug,
        allow_unsafe_werkzeug=allow_unsafe_werkzeug,
        use_reloader=use_reloader,
    )


if __name__ == "__main__":
    main()
