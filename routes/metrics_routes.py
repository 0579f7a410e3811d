# backend/routes/metrics_routes.py
from fastapi import APIRouter, HTTPException, Depends, Query, Request
from starlette.concurrency import run_in_threadpool
from typing import List
import logging

from models.metrics import TrackMetrics, PlayResult, LikeResult
from routes.deps import get_metrics_service
from services.errors import StoreUnavailable, ValidationError
from services.metrics_service import MetricsService

router = APIRouter()
LOG = logging.getLogger("routes.metrics")


def parse_ids(ids: str) -> List[str]:
    """'a, b,,c' -> ['a', 'b', 'c'] (conserva orden y duplicados)."""
    return [part.strip() for part in (ids or "").split(",") if part.strip()]

# ============================================================
# 🔹 Métricas en lote
# ============================================================
@router.get("/metrics", summary="Reproducciones y likes de varios tracks", response_model=List[TrackMetrics])
def list_metrics(
    ids: str = Query("", description="IDs separados por coma"),
    service: MetricsService = Depends(get_metrics_service),
):
    track_ids = parse_ids(ids)
    LOG.info(f"📊 Métricas solicitadas para {len(track_ids)} tracks")
    try:
        return service.get_batch(track_ids)
    except Exception as e:
        LOG.exception("❌ Error al obtener métricas")
        raise HTTPException(status_code=500, detail=str(e))

# ============================================================
# 🔹 Registrar reproducción
# ============================================================
@router.post("/tracks/{track_id}/play", summary="Registrar una reproducción", response_model=PlayResult)
def play_track(track_id: str, service: MetricsService = Depends(get_metrics_service)):
    try:
        return service.record_play(track_id)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        LOG.exception(f"❌ Error registrando play de {track_id}")
        raise HTTPException(status_code=500, detail=str(e))

async def read_json_object(request: Request) -> dict:
    """Cuerpo JSON si es un objeto; {} si falta, no es JSON o es otro tipo."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}

# ============================================================
# 🔹 Like / unlike por dispositivo
# ============================================================
@router.post("/tracks/{track_id}/like", summary="Marcar o desmarcar like", response_model=LikeResult)
async def like_track(
    track_id: str,
    request: Request,
    service: MetricsService = Depends(get_metrics_service),
):
    """
    Cuerpo: {"device": "<id de dispositivo>", "like": true|false}
    """
    payload = await read_json_object(request)
    try:
        return await run_in_threadpool(
            service.set_like, track_id, payload.get("device") or "", bool(payload.get("like"))
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        LOG.exception(f"❌ Error actualizando like de {track_id}")
        raise HTTPException(status_code=500, detail=str(e))
