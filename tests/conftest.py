from __future__ import annotations

import pathlib
from typing import Iterator

import pytest

from chair import create_app
from chair.config import Settings
from chair.db import init_db, make_engine, make_session_factory
from chair.hub import BroadcastHub
from chair.pipeline import IngestionPipeline
from chair.store import MemoryReadingStore, SqlReadingStore


@pytest.fixture()
def test_db_url(tmp_path: pathlib.Path) -> str:
    return f"sqlite:///{tmp_path / 'test.sqlite'}"


@pytest.fixture()
def settings(test_db_url: str) -> Settings:
    return Settings(database_url=test_db_url, subscriber_queue_size=8)


@pytest.fixture()
def sql_store(test_db_url: str) -> Iterator[SqlReadingStore]:
    engine = make_engine(test_db_url)
    init_db(engine)
    yield SqlReadingStore(make_session_factory(engine))
    engine.dispose()


@pytest.fixture()
def memory_store() -> MemoryReadingStore:
    return MemoryReadingStore()


@pytest.fixture()
def hub() -> Iterator[BroadcastHub]:
    hub = BroadcastHub(queue_size=8)
    yield hub
    hub.close()


@pytest.fixture()
def pipeline(memory_store: MemoryReadingStore, hub: BroadcastHub) -> IngestionPipeline:
    return IngestionPipeline(memory_store, hub)


@pytest.fixture()
def app(settings: Settings):
    app = create_app(settings)
    app.config["TESTING"] = True
    yield app
    app.extensions["smartchair"].hub.close()


@pytest.fixture()
def client(app):
    return app.test_client()
