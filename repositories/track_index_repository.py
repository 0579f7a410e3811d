# backend/repositories/track_index_repository.py
import json
import logging
from typing import List, Dict

from services.errors import DecodeError
from stores.blob_store import BlobStore

logger = logging.getLogger("repositories.track_index")

INDEX_KEY = "tracks/tracks.json"
INDEX_CONTENT_TYPE = "application/json"


# ============================================================
# 🔹 Parseo del documento índice
# ============================================================
def parse_index(text: str) -> List[Dict]:
    try:
        value = json.loads(text)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"Índice con JSON inválido: {e}") from e
    if not isinstance(value, list):
        raise DecodeError(f"El índice debe ser un array, llegó {type(value).__name__}")
    return [item for item in value if isinstance(item, dict)]


class TrackIndexRepository:
    """
    Índice público guardado como un único documento JSON (array de Track).

    append = leer todo + agregar + reescribir todo. Sin compare-and-swap,
    dos appends concurrentes pueden pisarse. Un backend con append atómico
    puede reemplazar esta clase sin cambiar a quien la usa.
    """

    def __init__(self, blob_store: BlobStore, key: str = INDEX_KEY):
        self.blob_store = blob_store
        self.key = key

    def read_all(self) -> List[Dict]:
        """Array de tracks; [] si no existe o está corrupto. StoreUnavailable se propaga."""
        obj = self.blob_store.get(self.key)
        if obj is None:
            return []
        try:
            return parse_index(obj.text())
        except (DecodeError, UnicodeDecodeError) as e:
            logger.warning(f"⚠️ Índice {self.key} ilegible, se trata como vacío: {e}")
            return []

    def write_all(self, tracks: List[Dict]) -> None:
        body = json.dumps(tracks, indent=2, ensure_ascii=False).encode("utf-8")
        self.blob_store.put(self.key, body, INDEX_CONTENT_TYPE)

    def append(self, track: Dict) -> None:
        tracks = self.read_all()
        tracks.append(track)
        self.write_all(tracks)
        logger.info(f"📝 Índice actualizado: {len(tracks)} tracks")
