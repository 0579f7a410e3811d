"""Configuración de pytest: almacenes en memoria y app de pruebas."""

import os

# Antes de importar config/main: nada de Mongo ni disco en los tests
os.environ.setdefault("KV_BACKEND", "memory")
os.environ.setdefault("BLOB_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from services.metrics_service import MetricsService
from services.track_index_service import TrackIndexService
from stores.blob_store import InMemoryBlobStore
from stores.kv_store import InMemoryKeyValueStore


class TestSettings(Settings):
    __test__ = False

    ENV = "test"
    DEBUG = False
    PUBLIC_BASE_URL = "http://testserver/media"
    ALLOWED_ORIGINS = ["*"]
    MAX_AUDIO_BYTES = 1024
    MAX_COVER_BYTES = 256
    METRICS_KEY_LOCKS = True


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def metrics_service(kv_store):
    return MetricsService(kv_store)


@pytest.fixture
def track_index_service(blob_store):
    return TrackIndexService(blob_store, TestSettings.PUBLIC_BASE_URL)


@pytest.fixture
def client(kv_store, blob_store):
    app = create_app(TestSettings(), kv_store=kv_store, blob_store=blob_store)
    return TestClient(app)
