"""
authy.py — Authy backups.

Declared but not implemented: Authy has no documented export format and it
is still open whether its secrets always use the standard Base32 alphabet.
An implementation must keep the adapter contract (fold over records with
fold_records(), skip what it cannot parse, never invent fields the backup
does not carry). Until then both directions refuse explicitly instead of
returning an empty list.
"""

from otpgen.errors import UnsupportedFormatError


def import_tokens(data: bytes, password=None):
    raise UnsupportedFormatError("Import from Authy is not supported yet")


def export_tokens(tokens, password=None) -> bytes:
    raise UnsupportedFormatError("Export to Authy is not supported yet")
