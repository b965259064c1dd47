"""
FLASK APP MAIN ENTRY POINT - OTPGEN API SERVER
==============================================

Sets up the Flask app, enables CORS and registers the /api blueprint.

Configuration (environment):
- OTPGEN_SECRET_KEY : Flask secret key
- OTPGEN_MAX_UPLOAD : largest accepted import upload in bytes (default 1 MiB)
"""

import os

from flask import Flask, jsonify
from flask_cors import CORS

from .routes import otp_bp

app = Flask(__name__)
app.secret_key = os.environ.get("OTPGEN_SECRET_KEY", "otpgen-dev-secret-key")
app.config["MAX_CONTENT_LENGTH"] = int(os.environ.get("OTPGEN_MAX_UPLOAD", 1024 * 1024))

# the web frontend is served from another origin
CORS(app)

app.register_blueprint(otp_bp)


@app.route("/", methods=["GET"])
def index():
    """API overview: every registered endpoint with its methods."""
    endpoints = sorted(
        (rule.rule, sorted(rule.methods - {"HEAD", "OPTIONS"}))
        for rule in app.url_map.iter_rules()
        if rule.endpoint != "static"
    )
    return jsonify({"service": "otpgen", "endpoints": [{"path": p, "methods": m} for p, m in endpoints]})


if __name__ == "__main__":
    app.run(debug=True, host="127.0.0.1", port=5000)
