# backend/services/key_locks.py
import threading
from contextlib import contextmanager
from typing import Dict


class KeyLocks:
    """
    Un lock por clave dentro de este proceso. Reduce la ventana de
    actualizaciones perdidas entre hilos del mismo worker; entre procesos o
    réplicas no protege nada.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str):
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if self._users[key] == 0:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


@contextmanager
def no_lock(key: str):
    yield
