"""
codec.py — Native token database: canonical JSON document plus optional
AES-256-GCM envelope (see crypto.py).

Document layout (UTF-8 JSON):

    {
      "format": "otpgen",
      "version": 1,
      "tokens": [
        {"type": "TOTP", "label": "...", "secret": "...", "digits": 6,
         "period": 30, "counter": 0, "algorithm": "SHA1", "icon": null},
        ...
      ]
    }

Fields are tagged by name, so readers ignore keys they do not know and a
missing optional field falls back to the token default. A database is
all-or-nothing: any bad record fails the whole load, no partial list is
returned.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from otpgen import config
from otpgen.errors import FormatError, TokenValidationError
from otpgen.token import Token

from . import crypto, storage

logger = logging.getLogger(__name__)


# --- Records ---------------------------------------------------------------------
def token_to_dict(token: Token) -> Dict[str, Any]:
    return {
        "type": token.type.value,
        "label": token.label,
        "secret": token.secret,
        "digits": token.digits,
        "period": token.period,
        "counter": token.counter,
        "algorithm": token.algorithm.value,
        "icon": token.icon,
    }


def token_from_dict(record: Dict[str, Any]) -> Token:
    """
    Build a Token from a record dict; unknown keys are ignored.

    Raises:
        FormatError: record is not an object or has no type
        TokenValidationError: a field is out of range
    """
    if not isinstance(record, dict) or "type" not in record:
        raise FormatError("Token record must be an object with a 'type'")

    kwargs = {}
    for field in ("label", "secret", "digits", "period", "counter", "algorithm", "icon"):
        if field in record:
            kwargs[field] = record[field]
    return Token(record["type"], **kwargs)


# --- Documents -------------------------------------------------------------------
def serialize(tokens: Sequence[Token]) -> bytes:
    document = {
        "format": config.DATABASE_FORMAT,
        "version": config.DATABASE_VERSION,
        "tokens": [token_to_dict(t) for t in tokens],
    }
    return json.dumps(document, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def deserialize(data: bytes) -> List[Token]:
    """
    Parse a plaintext database document.

    Raises:
        FormatError: not JSON, not an otpgen document, or an invalid record
    """
    try:
        document = json.loads(bytes(data).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError("Database is not a valid JSON document") from e

    if not isinstance(document, dict) or document.get("format") != config.DATABASE_FORMAT:
        raise FormatError("Not an otpgen database")
    if not isinstance(document.get("tokens"), list):
        raise FormatError("Database has no token list")
    version = document.get("version", config.DATABASE_VERSION)
    if isinstance(version, bool) or not isinstance(version, int):
        raise FormatError("Database version must be an integer")
    if version > config.DATABASE_VERSION:
        logger.warning("Database version %d is newer than %d, unknown fields are ignored",
                       version, config.DATABASE_VERSION)

    tokens = []
    for index, record in enumerate(document["tokens"]):
        try:
            tokens.append(token_from_dict(record))
        except TokenValidationError as e:
            raise FormatError(f"Invalid token record #{index}: {e}") from e
    return tokens


def save_database(tokens: Sequence[Token], password: Optional[str] = None) -> bytes:
    """
    Serialize tokens; encrypt when a password is given.

    Raises:
        CryptoError: empty password
    """
    data = serialize(tokens)
    if password is None:
        return data
    plaintext = bytearray(data)
    try:
        return crypto.encrypt(password, plaintext)
    finally:
        crypto.wipe(plaintext)


def load_database(data: bytes, password: Optional[str] = None) -> List[Token]:
    """
    Inverse of save_database().

    Raises:
        CryptoError: decryption failed (wrong password, tampering, short buffer)
        FormatError: the (decrypted) document is malformed
    """
    if password is None:
        return deserialize(data)

    plaintext = crypto.decrypt(password, data)
    try:
        tokens = deserialize(plaintext)
    finally:
        crypto.wipe(plaintext)
    logger.info("Loaded %d tokens from encrypted database", len(tokens))
    return tokens


# --- Files -----------------------------------------------------------------------
def load_database_file(path: str = config.DATABASE_FILE, password: Optional[str] = None) -> List[Token]:
    return load_database(storage.read_file(path), password)


def save_database_file(
    tokens: Sequence[Token], path: str = config.DATABASE_FILE, password: Optional[str] = None
) -> None:
    storage.write_file(path, save_database(tokens, password))
