import io
import json

from conftest import RFC_SEEDS, b32


def rfc_token(**overrides):
    token = {"type": "TOTP", "label": "rfc", "secret": b32(RFC_SEEDS["SHA1"]), "digits": 8}
    token.update(overrides)
    return token


def test_index_lists_endpoints(client):
    response = client.get("/")
    assert response.status_code == 200
    paths = {e["path"] for e in response.get_json()["endpoints"]}
    assert {"/api/generate", "/api/import", "/api/export"} <= paths


def test_new_secret(client):
    response = client.get("/api/secret")
    assert response.status_code == 200
    assert len(response.get_json()["secret"]) == 32


def test_generate_totp(client):
    response = client.post("/api/generate", json={"token": rfc_token(), "timestamp": 59})
    assert response.status_code == 200
    assert response.get_json() == {"code": "94287082", "remaining": 1, "type": "TOTP"}


def test_generate_accepts_bare_token(client):
    response = client.post("/api/generate", json=rfc_token(type="HOTP", counter=0, digits=6))
    assert response.get_json()["code"] == "755224"


def test_generate_invalid_secret(client):
    response = client.post("/api/generate", json=rfc_token(secret="!!!"))
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_generate_rejects_bad_timestamp(client):
    response = client.post("/api/generate", json={"token": rfc_token(), "timestamp": "now"})
    assert response.status_code == 400


def test_generate_requires_json(client):
    response = client.post("/api/generate", data="plain text")
    assert response.status_code == 400


def test_advance_hotp(client):
    response = client.post("/api/hotp/advance", json={"token": rfc_token(type="HOTP", counter=9)})
    assert response.status_code == 200
    assert response.get_json()["token"]["counter"] == 10


def test_advance_totp_is_rejected(client):
    response = client.post("/api/hotp/advance", json={"token": rfc_token()})
    assert response.status_code == 400


def test_verify(client):
    ok = client.post("/api/verify", json={"token": rfc_token(), "code": "07081804", "timestamp": 1111111109})
    bad = client.post("/api/verify", json={"token": rfc_token(), "code": "12345678", "timestamp": 1111111109})
    assert ok.get_json() == {"valid": True}
    assert bad.get_json() == {"valid": False}


def test_import_andotp_with_bad_record(client):
    backup = [
        {"secret": "JBSWY3DPEHPK3PXP", "label": "good", "period": 30, "digits": 6,
         "type": "TOTP", "algorithm": "SHA1", "thumbnail": "Default", "last_used": 0, "tags": []},
        {"label": "no secret", "type": "TOTP"},
    ]
    response = client.post(
        "/api/import",
        data={"file": (io.BytesIO(json.dumps(backup).encode()), "backup.json"), "format": "andotp"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert [t["label"] for t in body["tokens"]] == ["good"]
    assert body["skipped"] == 1


def test_import_requires_file(client):
    response = client.post("/api/import", data={"format": "andotp"}, content_type="multipart/form-data")
    assert response.status_code == 400


def test_export_then_import_encrypted(client):
    export = client.post("/api/export", json={
        "tokens": [rfc_token(), rfc_token(type="STEAM", label="steam")],
        "format": "andotp-encrypted",
        "password": "s3cret",
    })
    assert export.status_code == 200
    assert "attachment" in export.headers["Content-Disposition"]

    wrong = client.post(
        "/api/import",
        data={"file": (io.BytesIO(export.data), "backup.json.aes"), "format": "andotp-encrypted",
              "password": "nope"},
        content_type="multipart/form-data",
    )
    assert wrong.status_code == 401

    right = client.post(
        "/api/import",
        data={"file": (io.BytesIO(export.data), "backup.json.aes"), "format": "andotp-encrypted",
              "password": "s3cret"},
        content_type="multipart/form-data",
    )
    assert right.status_code == 200
    assert [t["type"] for t in right.get_json()["tokens"]] == ["TOTP", "STEAM"]


def test_export_plain_andotp(client):
    response = client.post("/api/export", json={"tokens": [rfc_token()], "format": "andotp"})
    assert response.status_code == 200
    (record,) = json.loads(response.data)
    assert record["label"] == "rfc"
    assert record["digits"] == 8


def test_unsupported_format(client):
    response = client.post("/api/export", json={"tokens": [], "format": "authy"})
    assert response.status_code == 501


def test_unknown_format(client):
    response = client.post("/api/export", json={"tokens": [], "format": "keepass"})
    assert response.status_code == 400


def test_otpauth_uri(client):
    response = client.post("/api/otpauth_uri", json={"token": rfc_token(), "issuer": "ACME"})
    assert response.get_json()["uri"].startswith("otpauth://totp/ACME:rfc?secret=")


def test_qr_code(client):
    response = client.post("/api/qr_code", json={"token": rfc_token()})
    assert response.status_code == 200
    body = response.get_json()
    assert body["qr_code"].startswith("data:image/png;base64,")
    assert body["uri"].startswith("otpauth://totp/")


def test_generate_non_ascii_secret(client):
    response = client.post("/api/generate", json=rfc_token(secret="JBSWY3DPEHPK3PXé"))
    assert response.status_code == 400


def test_generate_rejects_negative_timestamp(client):
    response = client.post("/api/generate", json={"token": rfc_token(), "timestamp": -1})
    assert response.status_code == 400


def test_generate_rejects_timestamp_beyond_counter_range(client):
    response = client.post("/api/generate", json={"token": rfc_token(), "timestamp": 30 * 2 ** 64})
    assert response.status_code == 400


def test_verify_window_limit(client):
    body = {"token": rfc_token(), "code": "07081804", "timestamp": 1111111109}
    assert client.post("/api/verify", json=dict(body, window=10)).get_json() == {"valid": True}
    response = client.post("/api/verify", json=dict(body, window=200000))
    assert response.status_code == 400
