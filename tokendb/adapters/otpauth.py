"""
otpauth.py — Plain text list of otpauth:// URIs, one per line.

This is what QR code scanners and most authenticator apps hand out. Blank
lines and lines starting with '#' are ignored; lines that fail to parse are
skipped.
"""

from typing import Sequence

from otpgen.errors import FormatError
from otpgen.token import Token
from otpgen.uri import format_otpauth_uri, parse_otpauth_uri

from .base import ImportResult, fold_records


def import_tokens(data: bytes) -> ImportResult:
    try:
        text = bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError("URI list is not UTF-8 text") from e
    lines = [line.strip() for line in text.splitlines()]
    return fold_records((line for line in lines if line and not line.startswith("#")), parse_otpauth_uri)


def export_tokens(tokens: Sequence[Token]) -> bytes:
    return "".join(format_otpauth_uri(t) + "\n" for t in tokens).encode("utf-8")
