# backend/models/metrics.py
from pydantic import BaseModel, ConfigDict
from typing import Tuple

MAX_DEVICE_LENGTH = 100


class MetricsRecord(BaseModel):
    """
    Métricas de un track: contador de reproducciones y conjunto de
    dispositivos que le dieron like. Inmutable; las transiciones devuelven
    un registro nuevo.
    """
    model_config = ConfigDict(frozen=True)

    play_count: int = 0
    likes: Tuple[str, ...] = ()

    @property
    def likes_count(self) -> int:
        return len(self.likes)


ZERO_RECORD = MetricsRecord()


# ============================================================
# 🔁 Transiciones puras (sin I/O)
# ============================================================
def apply_play(record: MetricsRecord) -> MetricsRecord:
    return record.model_copy(update={"play_count": record.play_count + 1})


def apply_like(record: MetricsRecord, device: str, like: bool) -> MetricsRecord:
    """Agrega o quita `device`. Repetir la misma llamada no cambia el estado."""
    if like:
        if device in record.likes:
            return record
        likes = record.likes + (device,)
    else:
        if device not in record.likes:
            return record
        likes = tuple(d for d in record.likes if d != device)
    return record.model_copy(update={"likes": likes})


# ============================================================
# 📤 Respuestas de la API
# ============================================================
class TrackMetrics(BaseModel):
    id: str
    playCount: int
    likesCount: int


class PlayResult(BaseModel):
    id: str
    playCount: int


class LikeResult(BaseModel):
    id: str
    likesCount: int
