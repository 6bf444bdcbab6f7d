"""
Error types raised by the vault.

Every error is recoverable at the caller boundary; none of them carries
secret material in its message.
"""


class VaultError(Exception):
    """Base class for all vault errors."""


class DerivationError(VaultError):
    """Key derivation failed (malformed salt or rejected cost parameters)."""


class AuthenticationError(VaultError):
    """Decryption failed: wrong master password, corrupted data, or tampering.

    These cases are deliberately not distinguished.
    """

    MESSAGE = "Wrong master password or corrupted entry"

    def __init__(self, message: str = MESSAGE):
        super().__init__(message)


class FormatError(VaultError):
    """An encrypted field token could not be parsed."""


class PersistenceError(VaultError):
    """The vault file could not be read or written."""


class VaultLockedError(VaultError, RuntimeError):
    """An operation was attempted on a session that has been cleared."""

    def __init__(self, message: str = "Vault is locked"):
        super().__init__(message)
