"""
tokendb package
===============

Persistence for otpgen tokens: the native (optionally encrypted) database
and the vendor import/export adapters.

    from tokendb import load_database, save_database
    blob = save_database(tokens, password="hunter2")
    assert load_database(blob, password="hunter2") == tokens
"""

from .adapters import Format, ImportResult, export_tokens, import_tokens
from .codec import (
    load_database,
    load_database_file,
    save_database,
    save_database_file,
    token_from_dict,
    token_to_dict,
)

__all__ = [
    "Format",
    "ImportResult",
    "export_tokens",
    "import_tokens",
    "load_database",
    "load_database_file",
    "save_database",
    "save_database_file",
    "token_from_dict",
    "token_to_dict",
]
