"""
Storage management for the credential vault.

The vault is a single JSON document. Passwords inside it are already
encrypted field tokens; this module never sees plaintext secrets.
"""

import os
import json
import logging
import threading
import weakref
import tempfile
from contextlib import contextmanager
from typing import List, Dict, Optional, Any, Iterator
from dataclasses import dataclass, asdict, field

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

from . import config
from .errors import PersistenceError
from .utils import set_owner_only_permissions

logger = logging.getLogger(__name__)


@dataclass
class VaultEntry:
    """Represents a single stored credential."""
    id: str
    service: str
    username: str
    password_encrypted: str
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VaultEntry':
        """Create from dictionary."""
        token = data['password_encrypted']
        if not isinstance(token, str) or not token:
            raise ValueError("'password_encrypted' must be a non-empty string")
        if not isinstance(data['id'], str) or not data['id']:
            raise ValueError("'id' must be a non-empty string")
        return cls(
            id=data['id'],
            service=data['service'],
            username=data['username'],
            password_encrypted=token,
            created_at=data.get('created_at', ""),
        )


@dataclass
class Vault:
    """The whole persisted vault: a reserved salt and the ordered entries."""
    salt: str = config.VAULT_SALT_PLACEHOLDER
    entries: List[VaultEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'salt': self.salt, 'entries': [e.to_dict() for e in self.entries]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vault':
        entries = data.get('entries', [])
        if not isinstance(entries, list):
            raise ValueError("'entries' must be a list")
        vault = cls(salt=data.get('salt', config.VAULT_SALT_PLACEHOLDER) or config.VAULT_SALT_PLACEHOLDER)
        for e in entries:
            vault.append(VaultEntry.from_dict(e))
        return vault

    def has_entry(self, entry_id: str) -> bool:
        return any(e.id == entry_id for e in self.entries)

    def append(self, entry: VaultEntry) -> None:
        """Append an entry, keeping ids unique."""
        if self.has_entry(entry.id):
            raise ValueError(f"Duplicate entry id: {entry.id}")
        self.entries.append(entry)


class _PathLock:
    """Write lock shared by every VaultStore pointing at the same file."""

    def __init__(self):
        self.mutex = threading.RLock()
        self.depth = 0
        self.lock_file = None


_path_locks: "weakref.WeakValueDictionary[str, _PathLock]" = weakref.WeakValueDictionary()
_path_locks_guard = threading.Lock()


def _lock_for(filepath: str) -> _PathLock:
    key = os.path.realpath(filepath)
    with _path_locks_guard:
        lock = _path_locks.get(key)
        if lock is None:
            lock = _PathLock()
            _path_locks[key] = lock
        return lock


class VaultStore:
    """Owns the vault file: whole-document load and atomic save."""

    def __init__(self, filepath: str):
        """
        Initialize the store.
        Args:
            filepath: Path to the vault JSON file
        """
        self.filepath = filepath
        self._lock = _lock_for(filepath)

    def exists(self) -> bool:
        return os.path.exists(self.filepath)

    def load(self, strict: bool = False) -> Vault:
        """
        Read the vault from disk.

        A missing file is an empty vault. A file that cannot be read or
        parsed is also treated as empty unless strict is set, in which case
        PersistenceError is raised so the caller never overwrites it.
        """
        if not self.exists():
            return Vault()

        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("vault root must be an object")
            return Vault.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            if strict:
                logger.error(f"Cannot load vault file {self.filepath}: {e}")
                raise PersistenceError(f"Cannot read vault file {self.filepath}: {e}") from e
            logger.warning(f"Vault file {self.filepath} is unreadable, treating as empty: {e}")
            return Vault()

    def save(self, vault: Vault) -> None:
        """
        Write the whole vault, replacing the previous file atomically.

        Raises:
            PersistenceError: On any I/O failure. The previous file is left intact.
        """
        payload = json.dumps(vault.to_dict(), indent=2)
        directory = os.path.dirname(os.path.abspath(self.filepath))

        with self._lock.mutex:
            tmp_path = None
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(
                    prefix=os.path.basename(self.filepath) + '.', suffix='.tmp', dir=directory
                )
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.filepath)
                tmp_path = None
            except OSError as e:
                logger.error(f"Error saving vault file {self.filepath}: {e}", exc_info=True)
                raise PersistenceError(f"Cannot write vault file {self.filepath}: {e}") from e
            finally:
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.remove(tmp_path)

            try:
                if not set_owner_only_permissions(self.filepath):
                    logger.warning(f"Failed to set secure file permissions for vault: {self.filepath}")
            except OSError as e:
                logger.warning(f"Failed to set secure file permissions for vault {self.filepath}: {e}")

        logger.debug(f"Saved vault {self.filepath} with {len(vault.entries)} entries")

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Hold the write lock for a read-modify-write sequence.

        Threads in this process serialize on a per-path lock; other processes
        are kept out with an advisory flock on a sidecar file where available.
        """
        lock = self._lock
        with lock.mutex:
            if lock.depth == 0:
                self._acquire_file_lock()
            lock.depth += 1
            try:
                yield
            finally:
                lock.depth -= 1
                if lock.depth == 0:
                    self._release_file_lock()

    def _acquire_file_lock(self) -> None:
        if fcntl is None:
            return
        lock_path = self.filepath + config.LOCK_FILE_SUFFIX
        try:
            os.makedirs(os.path.dirname(os.path.abspath(lock_path)), exist_ok=True)
            lock_file = open(lock_path, 'a+b')
        except OSError as e:
            raise PersistenceError(f"Cannot open vault lock file {lock_path}: {e}") from e
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        except OSError as e:
            lock_file.close()
            raise PersistenceError(f"Cannot lock vault file {self.filepath}: {e}") from e
        self._lock.lock_file = lock_file

    def _release_file_lock(self) -> None:
        lock_file: Optional[Any] = self._lock.lock_file
        if lock_file is None:
            return
        self._lock.lock_file = None
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
        finally:
            lock_file.close()
