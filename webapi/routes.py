"""
OTPGEN API ROUTES - FLASK BLUEPRINT

JSON endpoints over otpgen/tokendb. The API is stateless: tokens travel in the
request body (the same record layout as the native database) and come back
in the response, so the caller stays the owner of its token list.

EXAMPLES:
curl http://localhost:5000/api/secret
curl -X POST http://localhost:5000/api/generate -H "Content-Type: application/json" \
     -d '{"type": "TOTP", "label": "demo", "secret": "JBSWY3DPEHPK3PXP"}'
curl -X POST http://localhost:5000/api/import -F file=@backup.json -F format=andotp
"""

import base64
import io
import logging

import qrcode
from flask import Blueprint, jsonify, request, send_file
from werkzeug.utils import secure_filename

from otpgen import config, otp_core
from otpgen.errors import (
    CryptoError,
    FormatError,
    OTPGenError,
    TokenValidationError,
    UnsupportedFormatError,
)
from otpgen.uri import format_otpauth_uri
from tokendb.adapters import Format, export_tokens, import_tokens
from tokendb.codec import token_from_dict, token_to_dict

logger = logging.getLogger(__name__)

otp_bp = Blueprint("otp", __name__, url_prefix="/api")

EXPORT_MIMETYPES = {
    Format.OTPAUTH: "text/plain",
    Format.ANDOTP: "application/json",
}


def _error(e: OTPGenError):
    """Map an otpgen exception to a JSON error response."""
    if isinstance(e, UnsupportedFormatError):
        status = 501
    elif isinstance(e, CryptoError):
        status = 401
    else:
        status = 400
    return jsonify({"error": str(e)}), status


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise FormatError("JSON object body required")
    return data


def _token_from_body(data: dict):
    record = data.get("token", data)
    return token_from_dict(record)


def _timestamp(data: dict):
    timestamp = data.get("timestamp")
    if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int) or timestamp < 0):
        raise TokenValidationError("timestamp must be a non-negative integer")
    return timestamp


@otp_bp.route("/secret", methods=["GET"])
def new_secret():
    """
    NEW RANDOM BASE32 SECRET

      curl http://localhost:5000/api/secret
    """
    return jsonify({"secret": otp_core.random_secret()})


@otp_bp.route("/generate", methods=["POST"])
def generate_code():
    """
    CURRENT CODE OF A TOKEN

    Body: a token record, optionally {"token": {...}, "timestamp": 1111111109}
    Output: {"code": "081804", "remaining": 1}
    HOTP tokens are not advanced; call /api/hotp/advance after the code was used.
    """
    try:
        data = _json_body()
        token = _token_from_body(data)
        code, remaining = otp_core.generate(token, _timestamp(data))
    except OTPGenError as e:
        return _error(e)
    return jsonify({"code": code, "remaining": remaining, "type": token.type.value})


@otp_bp.route("/hotp/advance", methods=["POST"])
def advance_hotp():
    """
    COMMIT AN HOTP CODE

    Body: an HOTP token record. Output: the record with counter + 1.
    """
    try:
        token = _token_from_body(_json_body())
        otp_core.advance_counter(token)
    except OTPGenError as e:
        return _error(e)
    return jsonify({"token": token_to_dict(token)})


@otp_bp.route("/verify", methods=["POST"])
def verify_code():
    """
    VERIFY A CODE

    Body: {"token": {...}, "code": "123456", "window": 1}
    Output: {"valid": true} or {"valid": false}
    """
    try:
        data = _json_body()
        if "code" not in data:
            raise FormatError("Code is required")
        token = _token_from_body(data)
        window = data.get("window", 1)
        if isinstance(window, bool) or not isinstance(window, int) or not 0 <= window <= config.MAX_VERIFY_WINDOW:
            raise TokenValidationError(f"window must be an integer between 0 and {config.MAX_VERIFY_WINDOW}")
        valid = otp_core.verify(token, data["code"], _timestamp(data), window)
    except OTPGenError as e:
        return _error(e)
    return jsonify({"valid": valid})


@otp_bp.route("/import", methods=["POST"])
def import_file():
    """
    IMPORT A BACKUP FILE

      curl -X POST http://localhost:5000/api/import -F file=@backup.json.aes \
           -F format=andotp-encrypted -F password=s3cret

    Output: {"tokens": [...], "skipped": 0}
    """
    upload = request.files.get("file")
    if upload is None:
        return jsonify({"error": "file is required"}), 400

    try:
        result = import_tokens(upload.read(), request.form.get("format", ""), request.form.get("password") or None)
    except OTPGenError as e:
        return _error(e)

    logger.info("Imported %d tokens (%d skipped) from %s", len(result.tokens), result.skipped,
                secure_filename(upload.filename or "upload"))
    return jsonify({"tokens": [token_to_dict(t) for t in result.tokens], "skipped": result.skipped})


@otp_bp.route("/export", methods=["POST"])
def export_file():
    """
    EXPORT TOKENS AS A DOWNLOAD

    Body: {"tokens": [...], "format": "andotp", "password": null, "filename": "otp_accounts.json"}
    """
    try:
        data = _json_body()
        records = data.get("tokens")
        if not isinstance(records, list):
            raise FormatError("tokens must be a list")
        fmt = Format.from_name(data.get("format", ""))
        tokens = [token_from_dict(r) for r in records]
        blob = export_tokens(tokens, fmt, data.get("password") or None)
    except OTPGenError as e:
        return _error(e)

    filename = secure_filename(data.get("filename") or f"otp_accounts.{fmt.value}") or "otp_accounts"
    return send_file(
        io.BytesIO(blob),
        mimetype=EXPORT_MIMETYPES.get(fmt, "application/octet-stream"),
        as_attachment=True,
        download_name=filename,
    )


@otp_bp.route("/otpauth_uri", methods=["POST"])
def get_otpauth_uri():
    """
    OTPAUTH URI FOR AUTHENTICATOR APPS

    Body: {"token": {...}, "issuer": "MyApp"}
    """
    try:
        data = _json_body()
        token = _token_from_body(data)
    except OTPGenError as e:
        return _error(e)
    return jsonify({"uri": format_otpauth_uri(token, data.get("issuer"))})


@otp_bp.route("/qr_code", methods=["POST"])
def get_qr_code():
    """
    QR CODE IMAGE OF A TOKEN

    Body: {"token": {...}, "issuer": "MyApp"}
    Output: {"qr_code": "data:image/png;base64,...", "uri": "otpauth://..."}
    """
    try:
        data = _json_body()
        token = _token_from_body(data)
    except OTPGenError as e:
        return _error(e)

    uri = format_otpauth_uri(token, data.get("issuer"))

    qr = qrcode.QRCode(version=1, box_size=10, border=5)
    qr.add_data(uri)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer)
    img_str = base64.b64encode(buffer.getvalue()).decode()

    return jsonify({"qr_code": f"data:image/png;base64,{img_str}", "uri": uri})
