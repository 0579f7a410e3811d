# backend/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# ============================================================
# 🌍 DETECTAR ENTORNO Y CARGAR .env CORRESPONDIENTE
# ============================================================
ENV = os.getenv("ENV", "development")

env_file = ".env.production" if ENV == "production" else ".env.development"
dotenv_path = Path(__file__).resolve().parent / env_file
load_dotenv(dotenv_path)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ============================================================
# ⚙️ CONFIGURACIÓN GENERAL
# ============================================================
class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Bongo")
    VERSION: str = os.getenv("VERSION", "1.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # 🔹 HTTP
    ALLOWED_ORIGINS: list = os.getenv("ALLOWED_ORIGINS", "*").split(",")
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000/media")

    # 🔹 Límites de subida (bytes)
    MAX_AUDIO_BYTES: int = int(os.getenv("MAX_AUDIO_BYTES", "26214400"))
    MAX_COVER_BYTES: int = int(os.getenv("MAX_COVER_BYTES", "3145728"))

    # 🔹 Backends de almacenamiento
    KV_BACKEND: str = os.getenv("KV_BACKEND", "mongo")
    BLOB_BACKEND: str = os.getenv("BLOB_BACKEND", "local")
    METRICS_KEY_LOCKS: bool = _env_bool("METRICS_KEY_LOCKS", True)

    # 🔹 Mongo (métricas)
    MONGO_USER: str = os.getenv("MONGO_USER")
    MONGO_PASSWORD: str = os.getenv("MONGO_PASSWORD")
    MONGO_HOST: str = os.getenv("MONGO_HOST", "localhost")
    MONGO_PORT: str = os.getenv("MONGO_PORT", "27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "bongo")
    METRICS_COLLECTION: str = os.getenv("METRICS_COLLECTION", "metrics")

    # 🔹 Blob store local
    LOCAL_BLOB_DIR: str = os.getenv("LOCAL_BLOB_DIR", "./storage")

    # 🔹 Blob store S3 compatible (R2 / B2 / S3)
    S3_ENDPOINT_URL: str = os.getenv("S3_ENDPOINT_URL")
    S3_ACCESS_KEY_ID: str = os.getenv("S3_ACCESS_KEY_ID")
    S3_SECRET_ACCESS_KEY: str = os.getenv("S3_SECRET_ACCESS_KEY")
    S3_BUCKET: str = os.getenv("S3_BUCKET", "bongo-public")
    S3_REGION: str = os.getenv("S3_REGION", "auto")

    DEBUG: bool = ENV == "development"
    ENV: str = ENV

settings = Settings()
