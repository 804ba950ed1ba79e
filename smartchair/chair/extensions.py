from flask_socketio import SocketIO
import logging

socketio = SocketIO()

logging.basicConfig(level=logging.INFO)

logger = logging.getLogger("smartchair")
logger.setLevel(logging.INFO)
logger.propagate = False
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
logger.addHandler(handler)


def set_log_level(level: str) -> None:
    value = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(value)
    logger.setLevel(value)
