from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from flask import Flask, current_app

from .extensions import logger, set_log_level, socketio
from .config import Settings
from .db import init_db, make_engine, make_session_factory
from .history import HistoryQueryService
from .hub import BroadcastHub
from .pipeline import IngestionPipeline
from .store import ReadingStore, SqlReadingStore


@dataclass
class Services:
    store: ReadingStore
    hub: BroadcastHub
    pipeline: IngestionPipeline
    history: HistoryQueryService


def get_services() -> Services:
    return current_app.extensions["smartchair"]


def create_app(settings: Optional[Settings] = None, store: Optional[ReadingStore] = None) -> Flask:
    settings = settings or Settings.from_env()
    set_log_level(settings.log_level)

    app = Flask(__name__)
    app.config["SMARTCHAIR_SETTINGS"] = settings

    if store is None:
        engine = make_engine(settings.database_url)
        init_db(engine)
        store = SqlReadingStore(make_session_factory(engine))

    hub = BroadcastHub(settings.subscriber_queue_size)
    app.extensions["smartchair"] = Services(
        store=store,
        hub=hub,
        pipeline=IngestionPipeline(store, hub),
        history=HistoryQueryService(
            store,
            default_limit=settings.history_default_limit,
            max_limit=settings.history_max_limit,
        ),
    )

    from . import sockets  # noqa: F401  registers the socket handlers
    from .routes import chair, health, history

    app.register_blueprint(chair.bp)
    app.register_blueprint(history.bp)
    app.register_blueprint(health.bp)

    socketio.init_app(app, cors_allowed_origins=settings.cors_allowed_origins)
    logger.info(f"Smart chair app ready (store: {type(store).__name__})")
    return app
