"""Persistence of account keys and other material.

The bootstrap only needs `Persist.get` and `Persist.put`. Backends are free to
store the bytes anywhere; `MemoryPersist` and `FilePersist` are provided.
"""
import abc
import enum
import logging
import os
import tempfile
import threading
import urllib.parse
from typing import Dict
from typing import NamedTuple
from typing import Optional

from acme_account import errors

logger = logging.getLogger(__name__)


class PersistKind(enum.Enum):
    """Kind of persisted material."""
    CERTIFICATE = 'crt'
    PRIVATE_KEY = 'key'


class PersistKey(NamedTuple):
    """Address of one persisted value.

    :ivar str realm: Scope of the value, e.g. the contact email of an account.
    :ivar PersistKind kind: What is stored.
    :ivar str key: Discriminator within the realm, e.g. ``acme_account``.

    """
    realm: str
    kind: PersistKind
    key: str

    def __str__(self) -> str:
        return f'{self.realm}_{self.key}_{self.kind.value}'


class Persist(abc.ABC):
    """Storage for raw bytes addressed by `PersistKey`.

    Implementations raise `.PersistenceError` on failure. Atomicity of
    concurrent access to the same key is up to the implementation.
    """

    @abc.abstractmethod
    def get(self, key: PersistKey) -> Optional[bytes]:
        """Read a value, ``None`` if nothing is stored under ``key``."""

    @abc.abstractmethod
    def put(self, key: PersistKey, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""


class MemoryPersist(Persist):
    """In-memory persistence, shared by all users of the instance."""

    def __init__(self) -> None:
        self._values: Dict[PersistKey, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: PersistKey) -> Optional[bytes]:
        with self._lock:
            return self._values.get(key)

    def put(self, key: PersistKey, value: bytes) -> None:
        with self._lock:
            if key in self._values:
                logger.debug("Overwriting %s", key)
            self._values[key] = bytes(value)


def _escape(value: str) -> str:
    # "_" separates realm from key in file names, so it is escaped as well.
    return urllib.parse.quote(value, safe='@+').replace('_', '%5F')


class FilePersist(Persist):
    """Persistence as one file per key in a directory.

    Files are named "<realm>_<key>.<kind>", realm and key percent-encoded,
    and are written with mode 0600 and replaced atomically.

    :ivar str path: Directory holding the files.

    """

    def __init__(self, path: str) -> None:
        self.path = path

    def _file_path(self, key: PersistKey) -> str:
        realm = _escape(key.realm)
        name = _escape(key.key)
        return os.path.join(self.path, f'{realm}_{name}.{key.kind.value}')

    def get(self, key: PersistKey) -> Optional[bytes]:
        path = self._file_path(key)
        try:
            with open(path, 'rb') as value_file:
                return value_file.read()
        except FileNotFoundError:
            return None
        except OSError as error:
            raise errors.PersistenceError(error)

    def put(self, key: PersistKey, value: bytes) -> None:
        path = self._file_path(key)
        logger.debug('Writing %s to %s', key, path)
        try:
            os.makedirs(self.path, 0o700, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path, prefix='.tmp-')
            try:
                with os.fdopen(fd, 'wb') as value_file:
                    value_file.write(value)
                os.replace(tmp_path, path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as error:
            raise errors.PersistenceError(error)
