# backend/stores/blob_store.py
"""
Almacén de objetos (clave -> bytes + content-type).

Guarda el documento índice `tracks/tracks.json` y los medios subidos.
Backends: S3 compatible (Cloudflare R2, Backblaze B2, AWS S3), disco local
y memoria.
"""

import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from services.errors import StoreUnavailable

logger = logging.getLogger("stores.blob")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class BlobObject:
    data: bytes
    content_type: str = DEFAULT_CONTENT_TYPE

    def text(self, encoding: str = "utf-8") -> str:
        return self.data.decode(encoding)


class BlobStore(ABC):
    """Interfaz del almacén de objetos."""

    @abstractmethod
    def get(self, key: str) -> Optional[BlobObject]:
        """
        Descarga un objeto.

        Returns:
            BlobObject o None si la clave no existe.

        Raises:
            StoreUnavailable: si el backend falla.
        """
        pass

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None:
        """
        Sube (o sobrescribe) un objeto.

        Raises:
            StoreUnavailable: si el backend falla.
        """
        pass


# ============================================================
# ☁️ Backend S3 compatible (R2 / B2 / S3)
# ============================================================
class S3BlobStore(BlobStore):
    """
    Implementación con cliente boto3 S3.

    Para R2 el endpoint es https://<account_id>.r2.cloudflarestorage.com y
    la región 'auto'.
    """

    MISSING_CODES = ("NoSuchKey", "404", "NotFound")

    def __init__(self, bucket_name: str, s3_client=None, endpoint_url: Optional[str] = None,
                 access_key_id: Optional[str] = None, secret_access_key: Optional[str] = None,
                 region_name: str = "auto"):
        self.bucket_name = bucket_name
        self.s3_client = s3_client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region_name,
        )

    def get(self, key: str) -> Optional[BlobObject]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
            data = response["Body"].read()
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in self.MISSING_CODES:
                return None
            logger.error(f"❌ Error descargando {key} de {self.bucket_name}: {e}")
            raise StoreUnavailable(f"No se pudo leer el objeto {key!r}", key=key) from e
        except BotoCoreError as e:
            logger.error(f"❌ Error de conexión descargando {key}: {e}")
            raise StoreUnavailable(f"No se pudo leer el objeto {key!r}", key=key) from e
        return BlobObject(data=data, content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"❌ Error subiendo {key} a {self.bucket_name}: {e}")
            raise StoreUnavailable(f"No se pudo escribir el objeto {key!r}", key=key) from e


# ============================================================
# 💾 Backend en disco local
# ============================================================
class LocalBlobStore(BlobStore):
    """
    Un archivo por clave bajo `base_path`. El content-type se guarda en un
    archivo hermano `<archivo>.content-type`.
    """

    CONTENT_TYPE_SUFFIX = ".content-type"

    def __init__(self, base_path: str):
        self.base_path = Path(base_path).expanduser().absolute()

    def _get_path(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if self.base_path.resolve() not in path.parents:
            raise ValueError(f"Clave fuera del directorio base: {key}")
        return path

    def get(self, key: str) -> Optional[BlobObject]:
        path = self._get_path(key)
        if not path.is_file():
            return None
        meta_path = path.with_name(path.name + self.CONTENT_TYPE_SUFFIX)
        try:
            data = path.read_bytes()
            content_type = meta_path.read_text(encoding="utf-8").strip() if meta_path.is_file() else DEFAULT_CONTENT_TYPE
        except OSError as e:
            logger.error(f"❌ Error leyendo {path}: {e}")
            raise StoreUnavailable(f"No se pudo leer el objeto {key!r}", key=key) from e
        return BlobObject(data=data, content_type=content_type)

    def _write_atomic(self, path: Path, data: bytes) -> None:
        """Escribe en un temporal del mismo directorio y lo renombra encima."""
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._get_path(key)
        meta_path = path.with_name(path.name + self.CONTENT_TYPE_SUFFIX)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(meta_path, content_type.encode("utf-8"))
            self._write_atomic(path, data)
        except OSError as e:
            logger.error(f"❌ Error escribiendo {path}: {e}")
            raise StoreUnavailable(f"No se pudo escribir el objeto {key!r}", key=key) from e


# ============================================================
# 🧪 Backend en memoria (desarrollo y tests)
# ============================================================
class InMemoryBlobStore(BlobStore):
    def __init__(self):
        self._objects: Dict[str, BlobObject] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[BlobObject]:
        with self._lock:
            return self._objects.get(key)

    def put(self, key: str, data: bytes, content_type: str) -> None:
        with self._lock:
            self._objects[key] = BlobObject(data=bytes(data), content_type=content_type)

    def keys(self):
        with self._lock:
            return sorted(self._objects)
