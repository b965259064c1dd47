"""
uri.py — otpauth:// provisioning URIs (the payload of authenticator QR codes).

    otpauth://totp/GitHub:alice?secret=JBSWY3DPEHPK3PXP&issuer=GitHub&algorithm=SHA256&digits=6&period=30
    otpauth://hotp/alice?secret=JBSWY3DPEHPK3PXP&counter=4
    otpauth://totp/Steam:bob?secret=...&encoder=steam

See also: https://github.com/google/google-authenticator/wiki/Key-Uri-Format
"""

from typing import Dict, Optional, Union
from urllib.parse import quote, urlencode

import pyotp
from pyotp.contrib import Steam

from .errors import FormatError
from .token import Token, TokenType


def format_otpauth_uri(token: Token, issuer: Optional[str] = None) -> str:
    """
    Build the otpauth URI for a token.

    Steam tokens are written as TOTP with ``encoder=steam`` and no algorithm;
    Authy tokens as plain TOTP, which is what the Authy app itself accepts.

    Arguments:
        token: the token to describe
        issuer: optional issuer, prefixed to the label and added as parameter
    """
    otp_type = "hotp" if token.type is TokenType.HOTP else "totp"
    url_args: Dict[str, Union[int, str]] = {"secret": token.secret}

    label = quote(token.label)
    if issuer:
        label = quote(issuer) + ":" + label
        url_args["issuer"] = issuer

    if token.type is not TokenType.STEAM:
        url_args["algorithm"] = token.algorithm.value
    url_args["digits"] = token.digits
    if token.type is TokenType.HOTP:
        url_args["counter"] = token.counter
    else:
        url_args["period"] = token.period
    if token.type is TokenType.STEAM:
        url_args["encoder"] = "steam"

    return "otpauth://{0}/{1}?{2}".format(otp_type, label, urlencode(url_args).replace("+", "%20"))


def parse_otpauth_uri(uri: str) -> Token:
    """
    Parse an otpauth URI into a Token.

    pyotp does the parsing; its TOTP / HOTP / Steam object is copied onto a
    Token, with the issuer folded back into the "issuer:account" label.

    Raises:
        FormatError: not an otpauth URI, unknown OTP type, missing
            secret, non-numeric parameters, digits other than 6/7/8
        TokenValidationError: period/counter out of range
    """
    try:
        otp = pyotp.parse_uri(uri.strip())
    except (TypeError, ValueError) as e:
        # TypeError: pyotp's Steam class takes no algorithm parameter
        raise FormatError(f"Invalid otpauth URI: {e}") from e

    label = f"{otp.issuer}:{otp.name}" if otp.issuer else otp.name
    algorithm = otp.digest().name

    if isinstance(otp, Steam):
        return Token(TokenType.STEAM, label=label, secret=otp.secret)
    if isinstance(otp, pyotp.HOTP):
        return Token(TokenType.HOTP, label=label, secret=otp.secret, digits=otp.digits,
                     counter=otp.initial_count, algorithm=algorithm)
    return Token(TokenType.TOTP, label=label, secret=otp.secret, digits=otp.digits,
                 period=otp.interval, algorithm=algorithm)
