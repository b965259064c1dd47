"""
andotp.py — andOTP backup format (plain JSON and encrypted).

Entry schema (JSON array of objects):

    {
        "secret": "JBSWY3DPEHPK3PXP",
        "label": "GitHub:alice",
        "period": 30,
        "digits": 6,
        "type": "TOTP",            # exactly "TOTP", "HOTP" or "STEAM"
        "algorithm": "SHA1",
        "thumbnail": "Default",
        "last_used": 0,
        "tags": []
    }

HOTP entries also carry "counter". The encrypted backup is the same document
inside the crypto.py envelope.

See also: https://github.com/andOTP/andOTP/wiki/Special-features
"""

import json
import logging
from typing import Any, Dict, Optional, Sequence

from otpgen import config
from otpgen.errors import FormatError
from otpgen.token import Token, TokenType

from .. import crypto
from .base import ImportResult, fold_records

logger = logging.getLogger(__name__)

ANDOTP_TYPES = {
    "TOTP": TokenType.TOTP,
    "HOTP": TokenType.HOTP,
    "STEAM": TokenType.STEAM,
}
REQUIRED_FIELDS = ("type", "secret", "label")
TYPE_FIELDS = {
    TokenType.TOTP: ("period", "digits", "algorithm"),
    TokenType.HOTP: ("counter", "digits", "algorithm"),
    TokenType.STEAM: (),
}


def parse_record(elem: Any) -> Token:
    """
    Convert one andOTP entry to a Token.

    Raises:
        FormatError: missing/mistyped fields, unknown type, unknown algorithm
        TokenValidationError: digits/period/counter out of range
    """
    if not isinstance(elem, dict) or any(f not in elem for f in REQUIRED_FIELDS):
        raise FormatError("Entry lacks type/secret/label")

    token_type = ANDOTP_TYPES.get(elem["type"]) if isinstance(elem["type"], str) else None
    if token_type is None:
        raise FormatError(f"Unsupported entry type {elem['type']!r}")
    if not isinstance(elem["secret"], str) or not isinstance(elem["label"], str):
        raise FormatError("Entry secret and label must be strings")

    missing = [f for f in TYPE_FIELDS[token_type] if f not in elem]
    if missing:
        raise FormatError(f"{token_type.value} entry lacks {', '.join(missing)}")

    token = Token(token_type, label=elem["label"], secret=elem["secret"])
    if token_type is TokenType.TOTP:
        token.period = elem["period"]
    elif token_type is TokenType.HOTP:
        token.counter = elem["counter"]
    if token_type is not TokenType.STEAM:
        token.digits = elem["digits"]
        token.algorithm = elem["algorithm"]

    if not token.valid():
        raise FormatError("Entry has no usable algorithm or is empty")
    return token


def parse(data: bytes) -> ImportResult:
    """
    Parse a plain andOTP backup.

    Raises:
        FormatError: empty input, invalid JSON, or a root that is not an array
    """
    if not data:
        raise FormatError("andOTP backup is empty")
    try:
        document = json.loads(bytes(data).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError("andOTP backup is not valid JSON") from e
    if not isinstance(document, list):
        raise FormatError("andOTP backup root must be an array")
    return fold_records(document, parse_record)


def import_tokens(data: bytes, password: Optional[str] = None) -> ImportResult:
    """Plain backup when ``password`` is None, encrypted backup otherwise."""
    if password is None:
        return parse(data)

    plaintext = crypto.decrypt(password, data)
    try:
        return parse(plaintext)
    finally:
        crypto.wipe(plaintext)


def to_record(token: Token) -> Dict[str, Any]:
    # andOTP knows no Authy type, Authy tokens are plain TOTP there
    andotp_type = "TOTP" if token.type is TokenType.AUTHY else token.type.value
    record: Dict[str, Any] = {
        "secret": token.secret,
        "label": token.label,
        "period": token.period,
        "digits": token.digits,
        "type": andotp_type,
        "algorithm": token.algorithm.value,
    }
    if token.type is TokenType.HOTP:
        record["counter"] = token.counter
    elif token.type is TokenType.STEAM:
        record["digits"] = config.STEAM_DIGITS
        record["algorithm"] = "SHA1"
    record["thumbnail"] = "Default"
    record["last_used"] = 0
    record["tags"] = []
    return record


def dump(tokens: Sequence[Token]) -> bytes:
    return json.dumps([to_record(t) for t in tokens], ensure_ascii=False).encode("utf-8")


def export_tokens(tokens: Sequence[Token], password: Optional[str] = None) -> bytes:
    """
    Plain backup when ``password`` is None, encrypted backup otherwise.

    Raises:
        CryptoError: empty password, or nothing to encrypt
    """
    data = dump(tokens)
    if password is None:
        return data
    plaintext = bytearray(data)
    try:
        return crypto.encrypt(password, plaintext)
    finally:
        crypto.wipe(plaintext)
