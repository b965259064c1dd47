"""
Import/export adapters.

Each adapter translates one vendor representation to and from Token records
and owns that vendor's encryption envelope, if any. Adapters share no state.

    from tokendb.adapters import Format, import_tokens, export_tokens
    result = import_tokens(raw, Format.ANDOTP_ENCRYPTED, password="hunter2")
    result.tokens, result.skipped
"""

import enum
from typing import Any, Optional, Sequence

from otpgen.errors import FormatError
from otpgen.token import Token

from .. import codec
from . import andotp, authy, otpauth, steamguard
from .base import ImportResult, fold_records


class Format(str, enum.Enum):
    OTPGEN = "otpgen"
    ANDOTP = "andotp"
    ANDOTP_ENCRYPTED = "andotp-encrypted"
    OTPAUTH = "otpauth"
    STEAMGUARD = "steamguard"
    AUTHY = "authy"

    @classmethod
    def from_name(cls, name: Any) -> "Format":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise FormatError(f"Unknown format {name!r}") from None


def import_tokens(data: bytes, source_format: Any, password: Optional[str] = None) -> ImportResult:
    """
    Read tokens from ``data`` in ``source_format``.

    Per-record problems are counted in ImportResult.skipped; container
    problems raise.

    Raises:
        FormatError: unknown format, undecodable container
        CryptoError: decryption failed (encrypted formats)
        UnsupportedFormatError: declared but unimplemented format (Authy)
    """
    fmt = Format.from_name(source_format)
    if fmt is Format.OTPGEN:
        return ImportResult(codec.load_database(data, password), 0)
    if fmt is Format.ANDOTP:
        return andotp.import_tokens(data)
    if fmt is Format.ANDOTP_ENCRYPTED:
        return andotp.import_tokens(data, password or "")
    if fmt is Format.OTPAUTH:
        return otpauth.import_tokens(data)
    if fmt is Format.STEAMGUARD:
        return steamguard.import_tokens(data)
    return authy.import_tokens(data, password)


def export_tokens(tokens: Sequence[Token], target_format: Any, password: Optional[str] = None) -> bytes:
    """
    Write tokens in ``target_format``.

    Raises:
        FormatError: unknown format
        CryptoError: encryption failed (encrypted formats)
        UnsupportedFormatError: format has no writer (SteamGuard, Authy)
    """
    fmt = Format.from_name(target_format)
    if fmt is Format.OTPGEN:
        return codec.save_database(tokens, password)
    if fmt is Format.ANDOTP:
        return andotp.export_tokens(tokens)
    if fmt is Format.ANDOTP_ENCRYPTED:
        return andotp.export_tokens(tokens, password or "")
    if fmt is Format.OTPAUTH:
        return otpauth.export_tokens(tokens)
    if fmt is Format.STEAMGUARD:
        return steamguard.export_tokens(tokens)
    return authy.export_tokens(tokens, password)


__all__ = ["Format", "ImportResult", "export_tokens", "fold_records", "import_tokens"]
