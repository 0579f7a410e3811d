# backend/stores/kv_store.py
"""
Almacén clave-valor usado para las métricas por track.

Contrato mínimo: get/put por clave, último en escribir gana, sin
transacciones, sin locks, sin listados ni TTL.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from pymongo.errors import PyMongoError

from services.errors import StoreUnavailable

logger = logging.getLogger("stores.kv")


class KeyValueStore(ABC):
    """Interfaz del almacén clave-valor."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Lee el valor de una clave.

        Returns:
            El valor almacenado o None si la clave no existe.

        Raises:
            StoreUnavailable: si el backend falla.
        """
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """
        Escribe (o sobrescribe) el valor de una clave.

        Raises:
            StoreUnavailable: si el backend falla.
        """
        pass


# ============================================================
# 🍃 Backend MongoDB
# ============================================================
class MongoKeyValueStore(KeyValueStore):
    """
    Un documento por clave: {"_id": key, "value": "<json>"}.
    put hace replace con upsert, no hay control de versión.
    """

    def __init__(self, collection):
        self.collection = collection

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            logger.error(f"❌ Error leyendo clave {key!r} de MongoDB: {e}")
            raise StoreUnavailable(f"No se pudo leer la clave {key!r}", key=key) from e
        if not doc:
            return None
        return doc.get("value")

    def put(self, key: str, value: str) -> None:
        try:
            self.collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)
        except PyMongoError as e:
            logger.error(f"❌ Error escribiendo clave {key!r} en MongoDB: {e}")
            raise StoreUnavailable(f"No se pudo escribir la clave {key!r}", key=key) from e


# ============================================================
# 🧪 Backend en memoria (desarrollo y tests)
# ============================================================
class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
