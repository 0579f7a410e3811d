# backend/models/track.py
from dataclasses import dataclass
from pydantic import BaseModel
from typing import Optional


class Track(BaseModel):
    id: str
    title: str
    artist: str
    genre: str = "Unknown"
    cover: Optional[str] = None
    audio: str
    uploader: str = ""
    tipAddress: Optional[str] = None
    likesCount: int = 0  # foto al crear, no se sincroniza con las métricas
    tipTotalSats: int = 0
    createdAt: str


@dataclass
class MediaUpload:
    """Archivo recibido en la subida (audio o portada)."""
    data: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class TrackCandidate:
    """Campos ya saneados de una subida, antes de validar."""
    title: str
    artist: str
    audio: Optional[MediaUpload]
    cover: Optional[MediaUpload] = None
    genre: str = "Unknown"
    tip_address: str = ""
    uploader: str = ""
