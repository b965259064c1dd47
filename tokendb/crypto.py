"""
crypto.py — Password based AES-256-GCM envelope, byte compatible with andOTP's
encrypted backups.

Layout of an encrypted buffer (no length header, boundaries come from the
fixed sizes):

    [ IV (12 bytes) ][ ciphertext ][ GCM tag (16 bytes) ]

Key derivation is SHA-256 over the UTF-8 password, used directly as the
AES-256 key. That is andOTP's scheme and cannot be strengthened without
breaking compatibility.
"""

import hashlib
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from otpgen import config
from otpgen.errors import CryptoError

logger = logging.getLogger(__name__)


def sha256_password(password: str) -> bytes:
    """32-byte AES key from the password. Raises CryptoError for an empty password."""
    if not password:
        raise CryptoError("Password is empty")
    return hashlib.sha256(password.encode("utf-8")).digest()


def wipe(buffer: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    for i in range(len(buffer)):
        buffer[i] = 0


def encrypt(password: str, plaintext: bytes) -> bytes:
    """
    Encrypt ``plaintext`` and return IV || ciphertext || tag.

    Raises:
        CryptoError: empty plaintext or empty password
    """
    if not plaintext:
        raise CryptoError("Refusing to encrypt an empty buffer")
    key = sha256_password(password)
    iv = os.urandom(config.IV_SIZE)
    # AESGCM appends the 16-byte tag to the ciphertext
    sealed = AESGCM(key).encrypt(iv, bytes(plaintext), None)
    logger.debug("Encrypted %d bytes", len(plaintext))
    return iv + sealed


def decrypt(password: str, buffer: bytes) -> bytearray:
    """
    Decrypt an IV || ciphertext || tag buffer.

    The plaintext is returned as a bytearray so the caller can wipe() it once
    parsed.

    Raises:
        CryptoError: buffer too short (checked before any cipher work), empty
            password, or authentication failure (wrong password / tampering)
    """
    if len(buffer) <= config.IV_SIZE + config.TAG_SIZE:
        raise CryptoError("Encrypted buffer is too short")
    key = sha256_password(password)
    iv, sealed = bytes(buffer[: config.IV_SIZE]), bytes(buffer[config.IV_SIZE:])
    try:
        plaintext = AESGCM(key).decrypt(iv, sealed, None)
    except InvalidTag:
        logger.warning("Decryption failed: authentication tag mismatch")
        raise CryptoError("Decryption failed: wrong password or corrupted data") from None
    return bytearray(plaintext)
