"""
steamguard.py — SteamGuard / Steam Desktop Authenticator ``.maFile`` import.

A .maFile is a JSON object per account:

    {"shared_secret": "<base64>", "account_name": "bob", "revocation_code": "R12345", ...}

Only ``shared_secret`` and ``account_name`` are used. The secret is base64 in
the file and is re-encoded to Base32 for the token. A file may also hold an
array of such objects. Export is not provided: nothing reads .maFiles back.
"""

import base64
import binascii
import json
from typing import Any

from otpgen.errors import FormatError, UnsupportedFormatError
from otpgen.token import Token, TokenType

from .base import ImportResult, fold_records


def parse_record(elem: Any) -> Token:
    if not isinstance(elem, dict):
        raise FormatError("maFile entry must be an object")
    shared_secret = elem.get("shared_secret")
    account_name = elem.get("account_name")
    if not isinstance(shared_secret, str) or not isinstance(account_name, str):
        raise FormatError("maFile entry lacks shared_secret/account_name")
    try:
        key = base64.b64decode(shared_secret, validate=True)
    except binascii.Error as e:
        raise FormatError("shared_secret is not base64") from e
    if not key:
        raise FormatError("shared_secret is empty")

    secret = base64.b32encode(key).decode("ascii").rstrip("=")
    return Token(TokenType.STEAM, label=account_name, secret=secret)


def import_tokens(data: bytes) -> ImportResult:
    try:
        document = json.loads(bytes(data).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError("maFile is not valid JSON") from e
    if isinstance(document, dict):
        document = [document]
    if not isinstance(document, list):
        raise FormatError("maFile must be an object or an array of objects")
    return fold_records(document, parse_record)


def export_tokens(tokens) -> bytes:
    raise UnsupportedFormatError("Export to SteamGuard maFiles is not supported")
