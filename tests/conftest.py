import base64
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from otpgen.token import Token, TokenType  # noqa: E402


# RFC 6238 Appendix B seeds, one per hash algorithm
RFC_SEEDS = {
    "SHA1": b"12345678901234567890",
    "SHA256": b"12345678901234567890123456789012",
    "SHA512": b"1234567890123456789012345678901234567890123456789012345678901234",
}


def b32(raw: bytes) -> str:
    return base64.b32encode(raw).decode("ascii")


@pytest.fixture
def rfc_secret():
    """Base32 form of the RFC 4226 test secret."""
    return b32(RFC_SEEDS["SHA1"])


@pytest.fixture
def sample_tokens(rfc_secret):
    """One token of each variant, with non-default fields."""
    return [
        Token(TokenType.TOTP, label="GitHub:alice", secret=rfc_secret, digits=8, period=60, algorithm="SHA256"),
        Token(TokenType.HOTP, label="vpn", secret="JBSWY3DPEHPK3PXP", digits=6, counter=41, icon="vpn.png"),
        Token(TokenType.STEAM, label="Steam:bob", secret="JBSWY3DPEHPK3PXP"),
        Token(TokenType.AUTHY, label="Twilio", secret=rfc_secret, digits=7, period=10, counter=3),
    ]


@pytest.fixture
def client():
    from webapi.app import app

    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
