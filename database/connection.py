# backend/database/connection.py
import logging
from urllib.parse import quote_plus
from pymongo import MongoClient
from config import settings

logger = logging.getLogger("database.connection")

# ============================================================
# 🔧 CONSTRUCTOR DE URI
# ============================================================
def build_mongo_uri(cfg=settings) -> str:
    host = cfg.MONGO_HOST
    port = cfg.MONGO_PORT
    if cfg.MONGO_USER:
        user = quote_plus(cfg.MONGO_USER)
        password = quote_plus(cfg.MONGO_PASSWORD or "")
        return f"mongodb://{user}:{password}@{host}:{port}"
    return f"mongodb://{host}:{port}"

# ============================================================
# 📈 CONEXIÓN A BASE DE DATOS DE MÉTRICAS
# ============================================================
def get_metrics_db(cfg=settings):
    """
    Devuelve la base de métricas. MongoClient conecta de forma perezosa,
    así que crear el cliente no requiere que el servidor esté arriba.
    """
    try:
        client = MongoClient(build_mongo_uri(cfg), serverSelectionTimeoutMS=5000)
        db = client[cfg.MONGO_DB]
        logger.info(f"✅ Cliente Mongo listo para base de métricas: {cfg.MONGO_DB}")
        return db
    except Exception as e:
        logger.error(f"❌ Error creando cliente MongoDB ({cfg.MONGO_DB}): {e}")
        raise e


def get_metrics_collection(cfg=settings):
    return get_metrics_db(cfg)[cfg.METRICS_COLLECTION]
