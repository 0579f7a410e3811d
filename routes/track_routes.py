# backend/routes/track_routes.py
from fastapi import APIRouter, HTTPException, Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
import logging

from models.track import Track, TrackCandidate, MediaUpload
from routes.deps import get_track_index_service
from services.errors import StoreUnavailable, ValidationError
from services.track_index_service import TrackIndexService
from utils.media import sanitize

router = APIRouter()
LOG = logging.getLogger("routes.tracks")


class MediaTooLarge(Exception):
    pass


def file_part(value) -> UploadFile:
    """El campo del form si es un archivo; None si falta o viene vacío sin nombre."""
    if not isinstance(value, UploadFile):
        return None
    if not value.filename and not value.size:
        return None
    return value


async def read_media(part: UploadFile, max_bytes: int) -> MediaUpload:
    """Lee como mucho max_bytes + 1; nunca carga entero un archivo demasiado grande."""
    if part.size is not None and part.size > max_bytes:
        raise MediaTooLarge()
    data = await part.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise MediaTooLarge()
    return MediaUpload(data=data, content_type=part.content_type)

# ------------------------------------------------------------
# 🔹 Listar tracks
# ------------------------------------------------------------
@router.get("/tracks", summary="Índice público de tracks")
def list_tracks(service: TrackIndexService = Depends(get_track_index_service)):
    try:
        return service.list_tracks()
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        LOG.exception("❌ Error al listar tracks")
        raise HTTPException(status_code=500, detail=str(e))

# ------------------------------------------------------------
# 🔹 Subir track (audio + portada opcional)
# ------------------------------------------------------------
@router.post("/upload", summary="Subir un track nuevo")
async def upload_track(request: Request, service: TrackIndexService = Depends(get_track_index_service)):
    content_type = request.headers.get("content-type") or ""
    if "multipart/form-data" not in content_type:
        raise HTTPException(status_code=400, detail="Use multipart/form-data")

    form = await request.form()
    audio_part = file_part(form.get("audio"))
    cover_part = file_part(form.get("cover"))
    title = sanitize(form.get("title"))
    artist = sanitize(form.get("artist"))

    if not audio_part or not title or not artist:
        raise HTTPException(status_code=400, detail="Missing required fields")

    max_audio = request.app.state.settings.MAX_AUDIO_BYTES
    max_cover = request.app.state.settings.MAX_COVER_BYTES
    try:
        audio = await read_media(audio_part, max_audio)
    except MediaTooLarge:
        raise HTTPException(status_code=413, detail="Audio too large")
    cover = None
    if cover_part:
        try:
            cover = await read_media(cover_part, max_cover)
        except MediaTooLarge:
            raise HTTPException(status_code=413, detail="Cover too large")

    candidate = TrackCandidate(
        title=title,
        artist=artist,
        genre=sanitize(form.get("genre") or "Unknown"),
        tip_address=sanitize(form.get("tipAddress") or ""),
        uploader=sanitize(form.get("uploader") or ""),
        audio=audio,
        cover=cover,
    )

    LOG.info(f"🎵 Subida recibida: {candidate.artist} - {candidate.title} ({audio.size} bytes)")
    try:
        track: Track = await run_in_threadpool(service.append_track, candidate)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        LOG.exception("❌ Error subiendo track")
        raise HTTPException(status_code=500, detail=str(e))

    return {"ok": True, "track": track.model_dump()}
