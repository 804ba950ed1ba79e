import atexit

from chair import create_app
from chair.config import Settings
from chair.extensions import socketio, logger

settings = Settings.from_env()
app = create_app(settings)


@atexit.register
def shutdown():
    app.extensions["smartchair"].hub.close()


def main():
    logger.info(f"Starting Smart Chair server on port {settings.port}...")
    socketio.run(app, host="0.0.0.0", port=settings.port, allow_unsafe_werkzeug=True)


if __name__ == "__main__":
    main()
