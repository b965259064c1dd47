import hashlib

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from otpgen import config
from otpgen.errors import CryptoError
from tokendb import crypto


def test_key_is_sha256_of_password():
    assert crypto.sha256_password("hunter2") == hashlib.sha256(b"hunter2").digest()
    assert len(crypto.sha256_password("pässwörd")) == config.KEY_SIZE


def test_layout_is_iv_ciphertext_tag():
    plaintext = b'[{"secret": "JBSWY3DPEHPK3PXP"}]'
    blob = crypto.encrypt("hunter2", plaintext)
    assert len(blob) == config.IV_SIZE + len(plaintext) + config.TAG_SIZE

    # readable by a plain AES-GCM implementation with the andOTP convention
    iv, rest = blob[:config.IV_SIZE], blob[config.IV_SIZE:]
    key = hashlib.sha256(b"hunter2").digest()
    assert AESGCM(key).decrypt(iv, rest, None) == plaintext


def test_reads_buffer_built_by_another_implementation():
    key = hashlib.sha256(b"andotp").digest()
    iv = bytes(range(12))
    blob = iv + AESGCM(key).encrypt(iv, b"[]", None)
    assert bytes(crypto.decrypt("andotp", blob)) == b"[]"


def test_fresh_iv_per_encryption():
    assert crypto.encrypt("pw", b"data") != crypto.encrypt("pw", b"data")


def test_encrypting_empty_buffer_fails():
    with pytest.raises(CryptoError):
        crypto.encrypt("pw", b"")


def test_empty_password_fails():
    with pytest.raises(CryptoError):
        crypto.encrypt("", b"data")
    blob = crypto.encrypt("pw", b"data")
    with pytest.raises(CryptoError):
        crypto.decrypt("", blob)


def test_wrong_password_fails():
    blob = crypto.encrypt("right", b"secret material")
    with pytest.raises(CryptoError) as excinfo:
        crypto.decrypt("wrong", blob)
    assert "right" not in str(excinfo.value)
    assert "secret material" not in str(excinfo.value)


def test_tampered_buffer_fails():
    blob = bytearray(crypto.encrypt("pw", b"secret material"))
    blob[config.IV_SIZE] ^= 0x01
    with pytest.raises(CryptoError):
        crypto.decrypt("pw", bytes(blob))


@pytest.mark.parametrize("size", [0, 1, 12, 27, 28])
def test_short_buffer_fails_before_cipher(monkeypatch, size):
    def no_cipher(*args, **kwargs):
        raise AssertionError("cipher must not be constructed")

    monkeypatch.setattr(crypto, "AESGCM", no_cipher)
    with pytest.raises(CryptoError):
        crypto.decrypt("pw", b"\x00" * size)


def test_wipe_zeroes_buffer():
    buf = bytearray(b"secret")
    crypto.wipe(buf)
    assert buf == bytearray(6)
