# backend/services/track_index_service.py
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from models.track import Track, TrackCandidate, MediaUpload
from repositories.track_index_repository import TrackIndexRepository
from services.errors import StoreUnavailable, ValidationError
from stores.blob_store import BlobStore
from utils.media import pick_ext, join_url

logger = logging.getLogger("services.track_index")

DEFAULT_AUDIO_EXT = "mp3"
DEFAULT_AUDIO_TYPE = "audio/mpeg"
DEFAULT_COVER_EXT = "jpg"
DEFAULT_COVER_TYPE = "image/jpeg"


def utc_timestamp() -> str:
    """ISO-8601 en UTC con milisegundos y sufijo Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TrackIndexService:
    """
    Catálogo público de tracks.

    Los medios se suben antes de tocar el índice. Si la escritura del índice
    falla, los blobs ya subidos quedan huérfanos: no hay rollback.
    """

    def __init__(self, blob_store: BlobStore, public_base_url: str,
                 repository: Optional[TrackIndexRepository] = None):
        self.blob_store = blob_store
        self.public_base_url = public_base_url
        self.repository = repository or TrackIndexRepository(blob_store)
        # Serializa appends dentro del proceso; entre procesos no hay protección
        self._append_lock = threading.Lock()

    # ============================================================
    # 🔹 Listar tracks
    # ============================================================
    def list_tracks(self) -> List[Dict]:
        return self.repository.read_all()

    # ============================================================
    # 🔹 Subida de medios
    # ============================================================
    def _store_media(self, track_id: str, name: str, media: MediaUpload,
                     default_ext: str, default_type: str) -> str:
        ext = pick_ext(media.content_type) or default_ext
        key = f"tracks/{track_id}/{name}.{ext}"
        self.blob_store.put(key, media.data, media.content_type or default_type)
        logger.info(f"⬆️ {name} subido: {key} ({media.size} bytes)")
        return key

    # ============================================================
    # 🔹 Agregar track
    # ============================================================
    def append_track(self, candidate: TrackCandidate) -> Track:
        if not candidate.audio or not candidate.title or not candidate.artist:
            raise ValidationError("Missing required fields")

        track_id = str(uuid.uuid4())
        audio_key = self._store_media(track_id, "audio", candidate.audio,
                                      DEFAULT_AUDIO_EXT, DEFAULT_AUDIO_TYPE)
        cover_key = None
        if candidate.cover:
            cover_key = self._store_media(track_id, "cover", candidate.cover,
                                          DEFAULT_COVER_EXT, DEFAULT_COVER_TYPE)

        track = Track(
            id=track_id,
            title=candidate.title,
            artist=candidate.artist,
            genre=candidate.genre or "Unknown",
            cover=join_url(self.public_base_url, cover_key) if cover_key else None,
            audio=join_url(self.public_base_url, audio_key),
            uploader=candidate.uploader or "",
            tipAddress=candidate.tip_address or None,
            likesCount=0,
            tipTotalSats=0,
            createdAt=utc_timestamp(),
        )

        try:
            with self._append_lock:
                self.repository.append(track.model_dump())
        except StoreUnavailable:
            logger.error(f"❌ Índice no actualizado; medios huérfanos en tracks/{track_id}/")
            raise

        logger.info(f"✅ Track creado: {track.artist} - {track.title} ({track_id})")
        return track
