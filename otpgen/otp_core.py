"""
otp_core.py — Code generation for TOTP / HOTP / Steam Guard / Authy tokens.

Goals:
- Pure functions over a Token and a time or counter; no file access, no
  scheduling. The caller decides when to refresh.
- Every numeric parameter (digits, period, algorithm) is read from the token.
  Authy tokens with 7 digits / 10 s periods are the reason nothing here falls
  back to 6 / 30.
- Fail closed: an invalid field or undecodable secret raises GenerationError,
  never returns a placeholder code.

Algorithms:
- HOTP (RFC 4226):
  code = Truncate(HMAC-<algo>(key=secret, msg=counter)) mod 10^digits
- TOTP (RFC 6238): HOTP with counter = floor(unix_time / period).
- Steam Guard: TOTP with SHA1 / 30 s, but the truncated integer is spelled
  with 5 characters from STEAM_ALPHABET by repeated division.
- Authy: plain TOTP with the token's own digits/period.

HOTP counters are not advanced by generate(); call advance_counter() once the
code has actually been used, so a failed commit can be retried with the same
counter.
"""

import base64
import hmac
import logging
import struct
import time
from typing import Optional, Tuple

import pyotp

from . import config
from .errors import GenerationError, TokenValidationError
from .token import Algorithm, Token, TokenType

logger = logging.getLogger(__name__)


# --- Secrets -------------------------------------------------------------------
def random_secret(length: int = 32) -> str:
    """New random Base32 secret (160 bits for the default length)."""
    return pyotp.random_base32(length=length)


def decode_secret(secret_b32: str) -> bytes:
    """
    Base32-decode a secret, tolerating missing '=' padding and lower case.

    Raises:
        GenerationError: empty secret or invalid Base32
    """
    secret = "".join((secret_b32 or "").split()).upper().rstrip("=")
    if not secret:
        raise GenerationError("Secret is empty")
    missing_padding = len(secret) % 8
    if missing_padding:
        secret += "=" * (8 - missing_padding)
    try:
        key = base64.b32decode(secret, casefold=True)
    except ValueError as e:
        # binascii.Error for bad Base32, plain ValueError for non-ASCII input
        raise GenerationError("Invalid Base32 secret") from e
    if not key:
        raise GenerationError("Secret is empty")
    return key


# --- RFC helpers -----------------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """8-byte big-endian counter as RFC 4226 requires."""
    try:
        return struct.pack(">Q", i)
    except struct.error as e:
        raise GenerationError("Counter out of range") from e


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    The low nibble of the last byte is the offset; 4 bytes from there form a
    31-bit integer (the top bit is cleared).
    """
    offset = hmac_digest[-1] & 0x0F
    code = (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )
    return code


def truncated_hmac(key: bytes, counter: int, algorithm: Algorithm) -> int:
    digestmod = algorithm.digestmod
    if digestmod is None:
        raise GenerationError("Invalid hash algorithm")
    digest = hmac.new(key, int_to_bytes(counter), digestmod).digest()
    return dynamic_truncate(digest)


def hotp_code(key: bytes, counter: int, digits: int, algorithm: Algorithm = Algorithm.SHA1) -> str:
    """Decimal HOTP code, zero-padded to ``digits``."""
    dbc = truncated_hmac(key, counter, algorithm)
    return str(dbc % (10 ** digits)).zfill(digits)


def steam_code(key: bytes, counter: int) -> str:
    """Steam Guard code: 5 characters from STEAM_ALPHABET, least significant first."""
    dbc = truncated_hmac(key, counter, Algorithm.SHA1)
    chars = []
    for _ in range(config.STEAM_DIGITS):
        dbc, pos = divmod(dbc, len(config.STEAM_ALPHABET))
        chars.append(config.STEAM_ALPHABET[pos])
    return "".join(chars)


def timecode(timestamp: int, period: int) -> int:
    return int(timestamp) // period


def remaining_validity(period: int, timestamp: Optional[int] = None) -> int:
    """
    Seconds until the current period ends (1..period), one-second granularity.

    Returns 0 when period is 0.
    """
    if not period:
        return 0
    if timestamp is None:
        timestamp = int(time.time())
    return int(period - (int(timestamp) % period))


# --- Token level API -----------------------------------------------------------
def _check_generatable(token: Token) -> bytes:
    """Range-check every field and return the decoded key."""
    if token.algorithm is Algorithm.INVALID:
        raise GenerationError("Invalid hash algorithm")
    if not config.MIN_DIGITS <= token.digits <= config.MAX_DIGITS:
        raise GenerationError("Digits out of range")
    if token.is_time_based and not config.MIN_PERIOD <= token.period <= config.MAX_PERIOD:
        raise GenerationError("Period out of range")
    if not config.MIN_COUNTER <= token.counter <= config.MAX_COUNTER:
        raise GenerationError("Counter out of range")
    return decode_secret(token.secret)


def _code(token: Token, key: bytes, counter: int) -> str:
    if token.type is TokenType.STEAM:
        return steam_code(key, counter)
    return hotp_code(key, counter, token.digits, token.algorithm)


def code_at(token: Token, counter: int) -> str:
    """Code for an explicit counter value (time step or HOTP counter)."""
    return _code(token, _check_generatable(token), counter)


def generate(token: Token, timestamp: Optional[int] = None) -> Tuple[str, int]:
    """
    Generate the current code for a token.

    Arguments:
        token: any valid Token
        timestamp: epoch seconds (None -> time.time()); ignored for HOTP

    Returns:
        (code, remaining_seconds): remaining is 0 for HOTP, which does not
        expire with time.

    Raises:
        GenerationError: secret not Base32, field out of range, invalid algorithm,
            timestamp before the epoch
    """
    key = _check_generatable(token)
    if token.type is TokenType.HOTP:
        code = _code(token, key, token.counter)
        logger.debug("HOTP code generated for %r at counter %d", token.label, token.counter)
        return code, 0

    if timestamp is None:
        timestamp = int(time.time())
    code = _code(token, key, timecode(timestamp, token.period))
    return code, remaining_validity(token.period, timestamp)


def advance_counter(token: Token) -> int:
    """
    Commit an HOTP code: increment the stored counter by exactly one.

    Returns:
        the new counter value

    Raises:
        GenerationError: token is not HOTP, or the counter is already at its maximum
    """
    if token.type is not TokenType.HOTP:
        raise GenerationError(f"{token.type.value} tokens have no counter to advance")
    try:
        token.counter = token.counter + 1
    except TokenValidationError as e:
        raise GenerationError("Counter exhausted") from e
    return token.counter


def verify(token: Token, code: str, timestamp: Optional[int] = None, window: int = 1) -> bool:
    """
    Check a user-supplied code.

    Time-based tokens accept +/- ``window`` periods around ``timestamp``.
    HOTP tokens accept the stored counter and the next ``window`` values; the
    counter is not advanced here. ``window`` is capped at MAX_VERIFY_WINDOW.
    """
    if not 0 <= window <= config.MAX_VERIFY_WINDOW:
        raise GenerationError(f"Window must be between 0 and {config.MAX_VERIFY_WINDOW}")
    key = _check_generatable(token)
    if token.type is TokenType.HOTP:
        candidates = range(token.counter, min(token.counter + window, config.MAX_COUNTER) + 1)
    else:
        if timestamp is None:
            timestamp = int(time.time())
        current = timecode(timestamp, token.period)
        candidates = range(max(current - window, 0), current + window + 1)

    supplied = str(code).strip().upper().encode("utf-8")
    for counter in candidates:
        if hmac.compare_digest(_code(token, key, counter).encode("ascii"), supplied):
            return True
    return False
