"""
Validator utilities untuk AuthGate API.
Normalisasi identitas sebelum dipakai sebagai provider key.
"""

import re
from typing import Optional

import phonenumbers

from authgate.core.constants import RegexPattern

E164_PATTERN = re.compile(RegexPattern.E164_PHONE)


def normalize_email(email: str) -> str:
    """Lowercase dan trim; hasilnya dipakai sebagai EMAIL provider key."""
    return email.strip().lower()


def normalize_phone_number(phone: str) -> Optional[str]:
    """
    Normalize nomor telepon internasional ke format E.164.

    Args:
        phone: Nomor dengan prefix "+" (spasi, tanda hubung, dan kurung diabaikan)

    Returns:
        Nomor E.164 atau None jika tidak valid
    """
    if not phone or not isinstance(phone, str):
        return None

    try:
        parsed = phonenumbers.parse(phone, None)
    except phonenumbers.NumberParseException:
        return None

    # Validasi panjang saja; nomor baru/fiktif dari provider tetap diterima
    if not phonenumbers.is_possible_number(parsed):
        return None

    normalized = phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
    return normalized if E164_PATTERN.match(normalized) else None
