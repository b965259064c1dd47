"""
errors.py — Exception hierarchy for otpgen.

Every failure the core can report derives from OTPGenError so callers (the
Flask API, the CLI) can catch one type. The standard-library mixins keep
existing ``except ValueError`` / ``except OSError`` handlers working.

Messages never contain the shared secret, the password or key bytes.
"""


class OTPGenError(Exception):
    """Base class for all otpgen failures."""


class TokenValidationError(OTPGenError, ValueError):
    """A token field is out of range or otherwise invalid."""


class GenerationError(OTPGenError, ValueError):
    """Code generation failed closed; no code was produced."""


class FormatError(OTPGenError, ValueError):
    """A document or record could not be decoded."""


class CryptoError(OTPGenError):
    """Encryption or decryption failed (bad tag, short buffer, empty input)."""


class StorageError(OTPGenError, OSError):
    """Reading or writing a file failed."""


class UnsupportedFormatError(OTPGenError, NotImplementedError):
    """The requested import/export format is declared but not implemented."""
