"""
config.py — Shared constants for the token model, the generation engine and
the database codec.

Values that several components depend on live here instead of being repeated
as literals.
"""

import os

# --- Token limits ------------------------------------------------------------
MIN_DIGITS = 3
MAX_DIGITS = 10
MIN_PERIOD = 1              # seconds
MAX_PERIOD = 120            # seconds
MIN_COUNTER = 0
MAX_COUNTER = 0x7FFFFFFF
MAX_VERIFY_WINDOW = 10      # steps or counters on each side accepted by verify()

# --- Defaults for new TOTP/HOTP tokens ---------------------------------------
DEFAULT_DIGITS = 6
DEFAULT_TIME_STEP = 30      # seconds
DEFAULT_ALGORITHM = "SHA1"
SECRET_BYTES = 20           # 160-bit secret, RFC 4226 recommendation

# --- Steam Guard ---------------------------------------------------------------
STEAM_DIGITS = 5
STEAM_PERIOD = 30
STEAM_ALPHABET = "23456789BCDFGHJKMNPQRTVWXY"

# --- AES-256-GCM envelope (andOTP compatible) ------------------------------------
IV_SIZE = 12
TAG_SIZE = 16
KEY_SIZE = 32

# --- Native database document ------------------------------------------------
DATABASE_FORMAT = "otpgen"
DATABASE_VERSION = 1
DATABASE_FILE = os.environ.get("OTPGEN_DATABASE", "tokens.db")
