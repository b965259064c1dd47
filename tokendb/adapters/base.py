"""
base.py — Shared pieces of the import adapters.

An import is a fold over the source records: every record either becomes a
Token or bumps the ``skipped`` count. One malformed record never aborts an
otherwise valid batch; only container level problems (bad JSON, failed
decryption) do, and those raise before the fold starts.
"""

import logging
from typing import Any, Callable, Iterable, List, NamedTuple

from otpgen.errors import FormatError, TokenValidationError
from otpgen.token import Token

logger = logging.getLogger(__name__)


class ImportResult(NamedTuple):
    tokens: List[Token]
    skipped: int = 0


def fold_records(records: Iterable[Any], parse_record: Callable[[Any], Token]) -> ImportResult:
    """
    Apply ``parse_record`` to each record, collecting tokens and counting
    the records it rejects with FormatError / TokenValidationError.
    """
    tokens: List[Token] = []
    skipped = 0
    for index, record in enumerate(records):
        try:
            token = parse_record(record)
        except (FormatError, TokenValidationError) as e:
            # e never carries the secret
            logger.debug("Skipping record #%d: %s", index, e)
            skipped += 1
            continue
        tokens.append(token)

    logger.info("Imported %d tokens, skipped %d", len(tokens), skipped)
    return ImportResult(tokens, skipped)
