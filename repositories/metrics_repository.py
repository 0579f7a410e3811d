# backend/repositories/metrics_repository.py
"""
Codec de MetricsRecord y lectura/escritura contra el almacén clave-valor.

Formato almacenado (una clave por track id):
    {"playCount": 3, "likesSet": ["device-a", "device-b"]}
"""

import json
import logging
from typing import NamedTuple, Optional, Union

from models.metrics import MetricsRecord, ZERO_RECORD
from services.errors import DecodeError
from stores.kv_store import KeyValueStore

logger = logging.getLogger("repositories.metrics")

STATUS_OK = "ok"
STATUS_MISSING = "missing"
STATUS_MALFORMED = "malformed"


class DecodeResult(NamedTuple):
    status: str
    record: MetricsRecord

    @property
    def is_malformed(self) -> bool:
        return self.status == STATUS_MALFORMED


# ============================================================
# 🔹 Parseo estricto (lanza DecodeError)
# ============================================================
def parse_record(raw: Union[str, bytes]) -> MetricsRecord:
    try:
        value = json.loads(raw)
    except (ValueError, TypeError) as e:
        raise DecodeError(f"JSON inválido: {e}") from e
    if not isinstance(value, dict):
        raise DecodeError(f"Se esperaba un objeto, llegó {type(value).__name__}")

    play_count = value.get("playCount", 0)
    if play_count is None:
        play_count = 0
    if isinstance(play_count, bool) or not isinstance(play_count, int) or play_count < 0:
        raise DecodeError(f"playCount inválido: {play_count!r}")

    likes_set = value.get("likesSet", [])
    if likes_set is None:
        likes_set = []
    if not isinstance(likes_set, list) or not all(isinstance(d, str) for d in likes_set):
        raise DecodeError("likesSet debe ser una lista de strings")

    # dict.fromkeys conserva el orden y elimina duplicados
    return MetricsRecord(play_count=play_count, likes=tuple(dict.fromkeys(likes_set)))


# ============================================================
# 🔹 Codec tolerante
# ============================================================
def decode(raw: Optional[Union[str, bytes]], key: str = None) -> DecodeResult:
    """
    Nunca falla: ausencia -> 'missing', contenido corrupto -> 'malformed'.
    En ambos casos el registro es el valor cero. Ojo: esto enmascara la
    corrupción, que solo queda en el log.
    """
    if raw is None:
        return DecodeResult(STATUS_MISSING, ZERO_RECORD)
    try:
        return DecodeResult(STATUS_OK, parse_record(raw))
    except DecodeError as e:
        logger.warning(f"⚠️ Registro de métricas corrupto ({key or '?'}), se usa valor cero: {e}")
        return DecodeResult(STATUS_MALFORMED, ZERO_RECORD)


def encode(record: MetricsRecord) -> str:
    return json.dumps(
        {"playCount": record.play_count, "likesSet": list(dict.fromkeys(record.likes))},
        separators=(",", ":"),
    )


# ============================================================
# 🔹 Lectura / escritura
# ============================================================
def read_record(store: KeyValueStore, key: str) -> DecodeResult:
    """get + decode con valor por defecto. StoreUnavailable se propaga."""
    return decode(store.get(key), key=key)


def write_record(store: KeyValueStore, key: str, record: MetricsRecord) -> None:
    store.put(key, encode(record))
