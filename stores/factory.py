# backend/stores/factory.py
import logging

from config import settings
from stores.kv_store import KeyValueStore, MongoKeyValueStore, InMemoryKeyValueStore
from stores.blob_store import BlobStore, S3BlobStore, LocalBlobStore, InMemoryBlobStore

logger = logging.getLogger("stores.factory")


def create_kv_store(cfg=settings) -> KeyValueStore:
    backend = (cfg.KV_BACKEND or "").lower()
    if backend == "mongo":
        # Import diferido: solo se crea el cliente cuando se usa Mongo
        from database.connection import get_metrics_collection
        logger.info(f"📈 Métricas en MongoDB ({cfg.MONGO_DB}.{cfg.METRICS_COLLECTION})")
        return MongoKeyValueStore(get_metrics_collection(cfg))
    if backend == "memory":
        logger.warning("⚠️ Métricas en memoria: se pierden al reiniciar el proceso.")
        return InMemoryKeyValueStore()
    raise ValueError(f"KV_BACKEND desconocido: {cfg.KV_BACKEND}")


def create_blob_store(cfg=settings) -> BlobStore:
    backend = (cfg.BLOB_BACKEND or "").lower()
    if backend == "s3":
        logger.info(f"☁️ Blobs en bucket S3 {cfg.S3_BUCKET} ({cfg.S3_ENDPOINT_URL or 'AWS'})")
        return S3BlobStore(
            bucket_name=cfg.S3_BUCKET,
            endpoint_url=cfg.S3_ENDPOINT_URL,
            access_key_id=cfg.S3_ACCESS_KEY_ID,
            secret_access_key=cfg.S3_SECRET_ACCESS_KEY,
            region_name=cfg.S3_REGION,
        )
    if backend == "local":
        logger.info(f"💾 Blobs en disco: {cfg.LOCAL_BLOB_DIR}")
        return LocalBlobStore(cfg.LOCAL_BLOB_DIR)
    if backend == "memory":
        logger.warning("⚠️ Blobs en memoria: se pierden al reiniciar el proceso.")
        return InMemoryBlobStore()
    raise ValueError(f"BLOB_BACKEND desconocido: {cfg.BLOB_BACKEND}")
