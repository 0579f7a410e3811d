# backend/services/metrics_service.py
import logging
from typing import Iterable, List

from models.metrics import (
    MAX_DEVICE_LENGTH, ZERO_RECORD, apply_play, apply_like,
    TrackMetrics, PlayResult, LikeResult,
)
from repositories.metrics_repository import read_record, write_record
from services.errors import StoreUnavailable, ValidationError
from services.key_locks import KeyLocks, no_lock
from stores.kv_store import KeyValueStore

logger = logging.getLogger("services.metrics")


def normalize_device(device) -> str:
    if device is None:
        return ""
    return str(device)[:MAX_DEVICE_LENGTH]


class MetricsService:
    """
    Reproducciones y likes por track id, con leer-modificar-escribir contra
    el almacén KV.

    Sin locks, dos llamadas concurrentes sobre el mismo id leen el mismo
    estado y la segunda escritura gana: se puede perder un incremento o un
    like. Con `use_key_locks` la ventana se cierra solo dentro de este
    proceso; entre procesos sigue valiendo "último en escribir gana".
    """

    def __init__(self, store: KeyValueStore, use_key_locks: bool = True):
        self.store = store
        self._locks = KeyLocks() if use_key_locks else None

    def _hold(self, key: str):
        return self._locks.hold(key) if self._locks is not None else no_lock(key)

    # ============================================================
    # 🔹 Métricas en lote
    # ============================================================
    def get_batch(self, ids: Iterable[str]) -> List[TrackMetrics]:
        out = []
        for track_id in ids:
            try:
                record = read_record(self.store, track_id).record
            except StoreUnavailable as e:
                logger.warning(f"⚠️ Métricas de {track_id} no disponibles, se devuelven ceros: {e}")
                record = ZERO_RECORD
            out.append(TrackMetrics(id=track_id, playCount=record.play_count, likesCount=record.likes_count))
        return out

    # ============================================================
    # 🔹 Reproducción
    # ============================================================
    def record_play(self, track_id: str) -> PlayResult:
        with self._hold(track_id):
            record = apply_play(read_record(self.store, track_id).record)
            write_record(self.store, track_id, record)
        logger.info(f"▶️ Play registrado para {track_id}: {record.play_count}")
        return PlayResult(id=track_id, playCount=record.play_count)

    # ============================================================
    # 🔹 Like / unlike
    # ============================================================
    def set_like(self, track_id: str, device, like: bool) -> LikeResult:
        device = normalize_device(device)
        if not device:
            raise ValidationError("device required")

        with self._hold(track_id):
            record = apply_like(read_record(self.store, track_id).record, device, bool(like))
            write_record(self.store, track_id, record)
        logger.info(f"{'❤️' if like else '💔'} Like={bool(like)} en {track_id}: {record.likes_count}")
        return LikeResult(id=track_id, likesCount=record.likes_count)
