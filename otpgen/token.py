"""
token.py — Token record shared by the generation engine, the database codec
and the import/export adapters.

One record type covers every variant; the ``type`` tag decides which fields
matter:

    TOTP   secret, digits, period, algorithm
    HOTP   secret, digits, counter, algorithm
    STEAM  secret only (digits=5, period=30, SHA1 are fixed)
    AUTHY  like TOTP; carries a counter that generation never reads

All numeric fields go through validating setters, so a token built with an
out-of-range value raises instead of looking valid.
"""

import enum
import hashlib
from typing import Any, Optional

from . import config
from .errors import TokenValidationError


class TokenType(str, enum.Enum):
    TOTP = "TOTP"
    HOTP = "HOTP"
    STEAM = "STEAM"
    AUTHY = "AUTHY"

    @classmethod
    def from_name(cls, name: Any) -> "TokenType":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().upper())
        except ValueError:
            raise TokenValidationError(f"Unknown token type: {name!r}") from None


class Algorithm(str, enum.Enum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"
    INVALID = "INVALID"

    @classmethod
    def from_name(cls, name: Any) -> "Algorithm":
        """Case-insensitive lookup; anything unknown maps to INVALID."""
        if isinstance(name, cls):
            return name
        try:
            algo = cls(str(name).strip().upper())
        except ValueError:
            return cls.INVALID
        return algo

    @property
    def digestmod(self):
        """hashlib constructor for hmac.new(), or None for INVALID."""
        return _DIGESTS.get(self)


_DIGESTS = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}


def _check_int(name: str, value: Any, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TokenValidationError(f"{name} must be an integer")
    if not low <= value <= high:
        raise TokenValidationError(f"{name} must be in range [{low}, {high}], got {value}")
    return value


class Token:
    """
    A single OTP token.

    Arguments:
        type: TokenType or its name ("TOTP", "hotp", ...)
        label: display name; may be empty if the secret is not
        secret: Base32 shared secret
        digits: code length, 3..10 (forced to 5 for Steam)
        period: time step in seconds, 1..120 (forced to 30 for Steam)
        counter: HOTP counter, 0..0x7FFFFFFF
        algorithm: "SHA1", "SHA256" or "SHA512" (case-insensitive);
            anything else is stored as Algorithm.INVALID
        icon: optional cosmetic icon name/path

    Raises:
        TokenValidationError: unknown type, or digits/period/counter out of range
    """

    def __init__(
        self,
        type: Any = TokenType.TOTP,
        label: str = "",
        secret: str = "",
        digits: int = config.DEFAULT_DIGITS,
        period: int = config.DEFAULT_TIME_STEP,
        counter: int = config.MIN_COUNTER,
        algorithm: Any = config.DEFAULT_ALGORITHM,
        icon: Optional[str] = None,
    ) -> None:
        self._type = TokenType.from_name(type)
        self.label = label
        self.secret = secret
        self.digits = digits
        self.period = period
        self.counter = counter
        self.algorithm = algorithm
        self.icon = icon

    # --- Fields ----------------------------------------------------------------
    @property
    def type(self) -> TokenType:
        return self._type

    @property
    def label(self) -> str:
        return self._label

    @label.setter
    def label(self, value: Optional[str]) -> None:
        self._label = "" if value is None else str(value)

    @property
    def secret(self) -> str:
        return self._secret

    @secret.setter
    def secret(self, value: Optional[str]) -> None:
        # authenticator apps show secrets in groups of four: "JBSW Y3DP ..."
        self._secret = "" if value is None else "".join(str(value).split()).upper()

    @property
    def digits(self) -> int:
        return self._digits

    @digits.setter
    def digits(self, value: int) -> None:
        if self._type is TokenType.STEAM:
            self._digits = config.STEAM_DIGITS
            return
        self._digits = _check_int("digits", value, config.MIN_DIGITS, config.MAX_DIGITS)

    @property
    def period(self) -> int:
        return self._period

    @period.setter
    def period(self, value: int) -> None:
        if self._type is TokenType.STEAM:
            self._period = config.STEAM_PERIOD
            return
        self._period = _check_int("period", value, config.MIN_PERIOD, config.MAX_PERIOD)

    @property
    def counter(self) -> int:
        return self._counter

    @counter.setter
    def counter(self, value: int) -> None:
        self._counter = _check_int("counter", value, config.MIN_COUNTER, config.MAX_COUNTER)

    @property
    def algorithm(self) -> Algorithm:
        return self._algorithm

    @algorithm.setter
    def algorithm(self, value: Any) -> None:
        if self._type is TokenType.STEAM:
            self._algorithm = Algorithm.SHA1
            return
        self._algorithm = Algorithm.from_name(value)

    # --- Helpers ---------------------------------------------------------------
    @property
    def is_time_based(self) -> bool:
        return self._type is not TokenType.HOTP

    def valid(self) -> bool:
        """False for an empty record or an unrecognised algorithm."""
        if not self._label and not self._secret:
            return False
        return self._algorithm is not Algorithm.INVALID

    def copy(self) -> "Token":
        return Token(
            self._type,
            label=self._label,
            secret=self._secret,
            digits=self._digits,
            period=self._period,
            counter=self._counter,
            algorithm=self._algorithm,
            icon=self.icon,
        )

    def _fields(self) -> tuple:
        return (
            self._type,
            self._label,
            self._secret,
            self._digits,
            self._period,
            self._counter,
            self._algorithm,
            self.icon,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self._fields() == other._fields()

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return (
            f"Token(type={self._type.value}, label={self._label!r}, "
            f"secret={'(set)' if self._secret else '(empty)'}, digits={self._digits}, "
            f"period={self._period}, counter={self._counter}, algorithm={self._algorithm.value})"
        )
