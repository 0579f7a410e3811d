from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from config import settings
import logging

from services.metrics_service import MetricsService
from services.track_index_service import TrackIndexService
from stores.factory import create_kv_store, create_blob_store

# =====================================================
# * Importación de Routers
# =====================================================
from routes.metrics_routes import router as metrics_router
from routes.track_routes import router as track_router
from routes.media_routes import router as media_router

# =====================================================
# * Configuración de Logging global
# =====================================================
logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s"
)
logger = logging.getLogger("main")


CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type"]


def cors_headers(cfg, origin: str = None) -> dict:
    origins = cfg.ALLOWED_ORIGINS
    if "*" in origins:
        allow_origin = "*"
    elif origin in origins:
        allow_origin = origin
    else:
        allow_origin = origins[0]
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ",".join(CORS_METHODS),
        "Access-Control-Allow-Headers": ",".join(CORS_HEADERS),
    }


# =====================================================
# * Fábrica de la aplicación
# =====================================================
def create_app(cfg=settings, kv_store=None, blob_store=None) -> FastAPI:
    """
    Construye la app. Los tests inyectan almacenes en memoria; en producción
    se crean a partir de KV_BACKEND / BLOB_BACKEND.
    """
    app = FastAPI(
        title=f"{cfg.PROJECT_NAME} Backend",
        version=cfg.VERSION,
        debug=cfg.DEBUG
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.ALLOWED_ORIGINS,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    kv_store = kv_store if kv_store is not None else create_kv_store(cfg)
    blob_store = blob_store if blob_store is not None else create_blob_store(cfg)

    app.state.settings = cfg
    app.state.blob_store = blob_store
    app.state.metrics_service = MetricsService(kv_store, use_key_locks=cfg.METRICS_KEY_LOCKS)
    app.state.track_index_service = TrackIndexService(blob_store, cfg.PUBLIC_BASE_URL)

    app.include_router(metrics_router, prefix="/api", tags=["Metrics"])
    app.include_router(track_router, prefix="/api", tags=["Tracks"])
    app.include_router(media_router, prefix="/media", tags=["Media"])

    # CORSMiddleware solo contesta preflights completos; cualquier otro
    # OPTIONS también recibe las cabeceras CORS
    @app.options("/{path:path}", include_in_schema=False)
    def options_any(path: str, request: Request):
        return Response(status_code=200, headers=cors_headers(cfg, request.headers.get("origin")))

    @app.get("/", summary="Ruta raíz del backend")
    def root():
        return {
            "message": f"🚀 {cfg.PROJECT_NAME} Backend activo",
            "version": cfg.VERSION,
            "env": cfg.ENV
        }

    logger.info("📜 Routers registrados: /api/metrics, /api/tracks, /api/upload, /media")
    return app


app = create_app()
logger.info(f"🌍 {settings.PROJECT_NAME} backend iniciado en modo '{settings.ENV}'.")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
