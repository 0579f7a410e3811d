# backend/services/errors.py
"""Errores del subsistema de métricas e índice."""


class BongoError(Exception):
    """Base de todos los errores propios del backend."""


class ValidationError(BongoError):
    """Campo requerido ausente o fuera de límites. Se devuelve al cliente (400)."""


class DecodeError(BongoError):
    """Registro o documento almacenado con formato inválido.

    Uso interno: siempre se recupera localmente sustituyendo el valor por
    defecto documentado, nunca llega al cliente.
    """


class StoreUnavailable(BongoError):
    """Fallo del almacén externo (KV o blobs). No se reintenta."""

    def __init__(self, message: str, key: str = None):
        super().__init__(message)
        self.key = key
