"""
Flask JSON API over otpgen and tokendb.
"""

from .app import app

__all__ = ["app"]
