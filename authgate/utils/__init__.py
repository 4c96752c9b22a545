"""
Utility functions untuk AuthGate API.
"""

from authgate.utils.validators import normalize_email, normalize_phone_number

__all__ = ["normalize_email", "normalize_phone_number"]
