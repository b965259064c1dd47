"""
otpgen package
==============

One-time password generation for TOTP (RFC 6238), HOTP (RFC 4226), Steam
Guard and Authy tokens.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-<algo>(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(unix_time / period)
- Steam: TOTP/SHA1/30s, 5 characters from "23456789BCDFGHJKMNPQRTVWXY"
- Authy: TOTP with the token's own digits and period (e.g. 7 / 10s)

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from otpgen import Token, TokenType, advance_counter, generate, random_secret
>>> token = Token(TokenType.TOTP, label="GitHub:alice", secret=random_secret())
>>> code, remaining = generate(token)
>>> hotp = Token(TokenType.HOTP, label="vpn", secret="JBSWY3DPEHPK3PXP")
>>> code, _ = generate(hotp)
>>> advance_counter(hotp)   # only once the code was accepted
1

Storage lives in the sibling ``tokendb`` package.
"""

from .errors import (
    CryptoError,
    FormatError,
    GenerationError,
    OTPGenError,
    StorageError,
    TokenValidationError,
    UnsupportedFormatError,
)
from .otp_core import advance_counter, generate, random_secret, remaining_validity, verify
from .token import Algorithm, Token, TokenType
from .uri import format_otpauth_uri, parse_otpauth_uri

__version__ = "1.0.0"
