"""
Entry lifecycle: the operations the application exposes on a vault.

Every password is encrypted on its own, with a fresh salt and nonce, under a
key derived from the master password. The master password is never stored;
it is passed per call or held by a VaultSession until the session is cleared.
"""

import uuid
import datetime
import logging
from typing import List, Optional

from . import codec
from . import audit
from .crypto import CryptoManager
from .errors import AuthenticationError, DerivationError, FormatError, VaultLockedError
from .storage import VaultStore, VaultEntry

logger = logging.getLogger(__name__)


class VaultService:
    """Adds, lists and reveals credentials stored in a VaultStore."""

    def __init__(self, store: VaultStore, crypto: Optional[CryptoManager] = None,
                 audit_dir: Optional[str] = None):
        """
        Args:
            store: Storage for the vault file
            crypto: Crypto manager, a default-cost one is created if omitted
            audit_dir: Base directory for the audit log, ~/.credvault if omitted
        """
        self.store = store
        self.crypto = crypto or CryptoManager()
        self.audit_dir = audit_dir

    def encrypt_field(self, plaintext: str, master_password: str) -> str:
        """
        Encrypt one value into a token under a new salt and nonce.

        Raises:
            DerivationError: If key derivation fails
        """
        salt = self.crypto.generate_salt()
        key = self.crypto.derive_key(master_password, salt)
        try:
            nonce, ciphertext = self.crypto.encrypt(key, plaintext.encode('utf-8'))
        finally:
            self.crypto.clear_bytes(key)
        return codec.encode(salt, nonce, ciphertext)

    def decrypt_field(self, token: str, master_password: str) -> str:
        """
        Decrypt a token produced by encrypt_field.

        Raises:
            FormatError: If the token is malformed
            DerivationError: If the embedded salt is malformed
            AuthenticationError: Wrong master password or corrupted/tampered data
        """
        salt, nonce, ciphertext = codec.decode(token)
        key = self.crypto.derive_key(master_password, salt)
        try:
            plaintext = self.crypto.decrypt(key, nonce, ciphertext)
        finally:
            self.crypto.clear_bytes(key)
        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError:
            raise AuthenticationError() from None

    def add_entry(self, service: str, username: str, plaintext_password: str,
                  master_password: str) -> str:
        """
        Encrypt a password and append a new entry to the vault.

        Returns:
            The new entry's id
        """
        if not service:
            raise ValueError("Service name is required")
        if not plaintext_password:
            raise ValueError("Password is required")
        if not master_password:
            raise ValueError("Master password is required")

        entry = VaultEntry(
            id=str(uuid.uuid4()),
            service=service,
            username=username,
            password_encrypted=self.encrypt_field(plaintext_password, master_password),
            created_at=datetime.datetime.now().isoformat(timespec='seconds'),
        )

        with self.store.transaction():
            vault = self.store.load(strict=True)
            while vault.has_entry(entry.id):
                entry.id = str(uuid.uuid4())
            vault.append(entry)
            self.store.save(vault)

        logger.info(f"Added vault entry {entry.id} for service '{service}'")
        audit.log_action("ENTRY_ADDED", f"id={entry.id} service={service}", self.audit_dir)
        return entry.id

    def list_entries(self) -> List[VaultEntry]:
        """Return all entries in insertion order. Passwords stay encrypted."""
        return self.store.load().entries

    def get_entry(self, entry_id: str) -> Optional[VaultEntry]:
        return next((e for e in self.list_entries() if e.id == entry_id), None)

    def reveal_password(self, entry: VaultEntry, master_password: str) -> str:
        """
        Decrypt the password of one entry.

        Raises:
            AuthenticationError: Wrong master password or corrupted entry
        """
        try:
            password = self.decrypt_field(entry.password_encrypted, master_password)
        except AuthenticationError:
            logger.warning(f"Failed to reveal password for entry {entry.id}")
            audit.log_action("REVEAL_FAILED", f"id={entry.id} service={entry.service}", self.audit_dir)
            raise
        audit.log_action("PASSWORD_REVEALED", f"id={entry.id} service={entry.service}", self.audit_dir)
        return password

    def verify_master_password(self, master_password: str) -> bool:
        """
        Check a master password against the most recent readable entry.

        An empty vault accepts any password. Entries are encrypted one by one,
        so this is a convenience check, not a guarantee for older entries.
        """
        for entry in reversed(self.list_entries()):
            try:
                self.decrypt_field(entry.password_encrypted, master_password)
                return True
            except AuthenticationError:
                return False
            except (FormatError, DerivationError) as e:
                logger.warning(f"Skipping malformed entry {entry.id} during verification: {e}")
        return True

    def unlock(self, master_password: str) -> 'VaultSession':
        """
        Open a session holding the master password until it is cleared.

        Raises:
            AuthenticationError: If the password does not match the vault
        """
        if not master_password:
            raise ValueError("Master password is required")
        if not self.verify_master_password(master_password):
            audit.log_action("UNLOCK_FAILED", self.store.filepath, self.audit_dir)
            raise AuthenticationError()
        audit.log_action("UNLOCK", self.store.filepath, self.audit_dir)
        return VaultSession(self, master_password)


class VaultSession:
    """
    Master password held for an explicit lifetime.

    Use as a context manager or call clear() when done; afterwards every
    operation raises VaultLockedError.
    """

    def __init__(self, service: VaultService, master_password: str):
        self._service = service
        self._master: Optional[bytearray] = bytearray(master_password.encode('utf-8'))

    @property
    def is_active(self) -> bool:
        return self._master is not None

    def _password(self) -> str:
        if self._master is None:
            raise VaultLockedError()
        return self._master.decode('utf-8')

    def add_entry(self, service: str, username: str, plaintext_password: str) -> str:
        return self._service.add_entry(service, username, plaintext_password, self._password())

    def list_entries(self) -> List[VaultEntry]:
        if self._master is None:
            raise VaultLockedError()
        return self._service.list_entries()

    def reveal_password(self, entry: VaultEntry) -> str:
        return self._service.reveal_password(entry, self._password())

    def clear(self) -> None:
        """Forget the master password."""
        if self._master is not None:
            self._service.crypto.clear_bytes(self._master)
            self._master = None
            audit.log_action("LOCK", self._service.store.filepath, self._service.audit_dir)

    def __enter__(self) -> 'VaultSession':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()
