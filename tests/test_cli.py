import json

import pytest

from otpgen import otp_cli
from tokendb import codec

from conftest import RFC_SEEDS, b32


@pytest.fixture
def db(tmp_path, monkeypatch):
    monkeypatch.delenv("OTPGEN_PASSWORD", raising=False)
    return str(tmp_path / "tokens.db")


def run(db, *argv, password="pw"):
    return otp_cli.main(["--db", db, "--password", password, *argv])


def test_add_and_show(db, capsys):
    assert run(db, "add", "--label", "GitHub:alice", "--secret", b32(RFC_SEEDS["SHA1"])) == 0
    assert run(db, "add", "--type", "steam", "--label", "Steam:bob", "--secret", "JBSWY3DPEHPK3PXP") == 0
    (totp, steam) = codec.load_database_file(db, "pw")
    assert totp.label == "GitHub:alice"
    assert steam.digits == 5

    capsys.readouterr()
    assert run(db, "show") == 0
    out = capsys.readouterr().out
    assert "GitHub:alice" in out
    assert "Steam:bob" in out


def test_add_rejects_bad_secret(db, capsys):
    assert run(db, "add", "--label", "x", "--secret", "!!!") == 1
    assert "[!]" in capsys.readouterr().out


def test_add_rejects_out_of_range_digits(db):
    assert run(db, "add", "--label", "x", "--digits", "12") == 1


def test_next_advances_hotp(db, capsys):
    run(db, "add", "--type", "hotp", "--label", "vpn", "--secret", b32(RFC_SEEDS["SHA1"]))
    capsys.readouterr()
    assert run(db, "next", "--index", "0") == 0
    assert "755224" in capsys.readouterr().out
    assert run(db, "next", "--index", "0") == 0
    assert "287082" in capsys.readouterr().out
    assert codec.load_database_file(db, "pw")[0].counter == 2


def test_next_with_wrong_password(db, capsys):
    run(db, "add", "--type", "hotp", "--label", "vpn", "--secret", b32(RFC_SEEDS["SHA1"]))
    assert run(db, "next", "--index", "0", password="other") == 1


def test_import_and_export(db, tmp_path, capsys):
    backup = tmp_path / "andotp.json"
    backup.write_text(json.dumps([
        {"secret": "JBSWY3DPEHPK3PXP", "label": "one", "period": 30, "digits": 6,
         "type": "TOTP", "algorithm": "SHA1", "thumbnail": "Default", "last_used": 0, "tags": []},
        {"label": "broken"},
    ]))
    assert run(db, "import", "--file", str(backup), "--format", "andotp") == 0
    assert "skipped 1" in capsys.readouterr().out

    out_file = tmp_path / "out.txt"
    assert run(db, "export", "--file", str(out_file), "--format", "otpauth") == 0
    assert out_file.read_text().startswith("otpauth://totp/one?secret=JBSWY3DPEHPK3PXP")


def test_import_missing_file(db, tmp_path):
    assert run(db, "import", "--file", str(tmp_path / "missing.json"), "--format", "andotp") == 1


def test_next_rejects_negative_index(db, capsys):
    run(db, "add", "--type", "hotp", "--label", "vpn", "--secret", b32(RFC_SEEDS["SHA1"]))
    run(db, "add", "--type", "hotp", "--label", "other", "--secret", "JBSWY3DPEHPK3PXP")
    capsys.readouterr()
    assert run(db, "next", "--index", "-1") == 1
    assert "No token at index -1" in capsys.readouterr().out
    assert [t.counter for t in codec.load_database_file(db, "pw")] == [0, 0]


def test_show_survives_non_ascii_secret(db, tmp_path, capsys):
    backup = tmp_path / "andotp.json"
    backup.write_text(json.dumps([
        {"secret": "ÄBCD", "label": "odd", "period": 30, "digits": 6,
         "type": "TOTP", "algorithm": "SHA1", "thumbnail": "Default", "last_used": 0, "tags": []},
    ]))
    run(db, "import", "--file", str(backup), "--format", "andotp")
    capsys.readouterr()
    assert run(db, "show") == 0
    assert "error" in capsys.readouterr().out
