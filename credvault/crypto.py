"""
Cryptographic operations for the credential vault.

Keys are derived with Argon2id and used with AES-256-GCM. A derived key only
lives for the duration of one encrypt or decrypt call.
"""

import os
import logging
from typing import Tuple, Optional, Union
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.backends import default_backend
from cryptography.exceptions import InvalidTag
from argon2 import Type
from argon2.exceptions import HashingError
from argon2.low_level import hash_secret_raw

from . import config
from .errors import AuthenticationError, DerivationError

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray]


class CryptoManager:
    """Handles key derivation and authenticated encryption."""

    # Constants
    SALT_SIZE = config.SALT_SIZE
    KEY_SIZE = config.KEY_SIZE
    NONCE_SIZE = config.NONCE_SIZE
    TAG_SIZE = config.TAG_SIZE

    def __init__(self, time_cost: Optional[int] = None, memory_cost: Optional[int] = None,
                 parallelism: Optional[int] = None):
        """
        Initialize the crypto manager.

        Args:
            time_cost: Argon2id iterations, defaults to config.ARGON2_TIME_COST
            memory_cost: Argon2id memory in KiB, defaults to config.ARGON2_MEMORY_COST
            parallelism: Argon2id lanes, defaults to config.ARGON2_PARALLELISM
        """
        self.backend = default_backend()
        self.time_cost = time_cost if time_cost is not None else config.ARGON2_TIME_COST
        self.memory_cost = memory_cost if memory_cost is not None else config.ARGON2_MEMORY_COST
        self.parallelism = parallelism if parallelism is not None else config.ARGON2_PARALLELISM

    def generate_salt(self) -> bytes:
        """Generate a cryptographically secure random salt."""
        return os.urandom(self.SALT_SIZE)

    def derive_key(self, password: str, salt: bytes) -> bytearray:
        """
        Derive an encryption key from a password using Argon2id.

        The key length is requested from Argon2 directly rather than cut
        from a longer encoded hash.

        Args:
            password: The master password
            salt: Random salt of SALT_SIZE bytes

        Returns:
            32-byte encryption key. The caller should clear_bytes() it when done.

        Raises:
            DerivationError: If the salt is malformed or argon2 rejects the cost parameters
        """
        if not isinstance(salt, (bytes, bytearray)) or len(salt) != self.SALT_SIZE:
            raise DerivationError(f"Salt must be {self.SALT_SIZE} bytes")
        try:
            key = hash_secret_raw(
                secret=password.encode('utf-8'),
                salt=bytes(salt),
                time_cost=self.time_cost,
                memory_cost=self.memory_cost,
                parallelism=self.parallelism,
                hash_len=self.KEY_SIZE,
                type=Type.ID
            )
        except (HashingError, OverflowError, TypeError) as e:
            logger.error(f"Argon2id rejected derivation parameters: {e}")
            raise DerivationError(f"Key derivation failed: {e}") from e
        return bytearray(key)

    def encrypt(self, key: BytesLike, plaintext: bytes) -> Tuple[bytes, bytes]:
        """
        Encrypt data using AES-256-GCM under a freshly generated nonce.

        Args:
            key: 32-byte encryption key
            plaintext: Data to encrypt

        Returns:
            Tuple of (nonce, ciphertext) where ciphertext ends with the 16-byte tag
        """
        self._check_key(key)
        nonce = os.urandom(self.NONCE_SIZE)
        cipher = Cipher(
            algorithms.AES(bytes(key)),
            modes.GCM(nonce),
            backend=self.backend
        )
        encryptor = cipher.encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return nonce, ciphertext + encryptor.tag

    def decrypt(self, key: BytesLike, nonce: bytes, ciphertext: bytes) -> bytes:
        """
        Decrypt data using AES-256-GCM.

        Args:
            key: 32-byte encryption key
            nonce: Nonce used for encryption
            ciphertext: Encrypted data followed by the authentication tag

        Returns:
            Decrypted plaintext

        Raises:
            AuthenticationError: If the tag does not verify, or nonce/ciphertext are malformed
        """
        self._check_key(key)
        if len(nonce) != self.NONCE_SIZE or len(ciphertext) < self.TAG_SIZE:
            raise AuthenticationError()
        body, tag = ciphertext[:-self.TAG_SIZE], ciphertext[-self.TAG_SIZE:]
        cipher = Cipher(
            algorithms.AES(bytes(key)),
            modes.GCM(nonce, tag),
            backend=self.backend
        )
        decryptor = cipher.decryptor()
        try:
            # update() output is only released once finalize() has verified the tag
            plaintext = decryptor.update(body)
            plaintext += decryptor.finalize()
        except InvalidTag:
            raise AuthenticationError() from None
        return plaintext

    def _check_key(self, key: BytesLike) -> None:
        if len(key) != self.KEY_SIZE:
            raise ValueError(f"Key must be {self.KEY_SIZE} bytes")

    def clear_bytes(self, data: Optional[bytearray]) -> None:
        """Attempt to clear sensitive bytes from memory."""
        if isinstance(data, bytearray):
            for i in range(len(data)):
                data[i] = 0
