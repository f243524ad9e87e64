import re

from labnotify.errors import ValidationError

_SEPARATORS_RE = re.compile(r"[\s\-]+")


def normalize_phone(phone: str, country_code: str = "880") -> str:
    """Return *phone* in international digit form.

    ``01712345678``, ``01-712-345-678`` and ``+880 1712-345678`` all become
    ``8801712345678``. A ``+`` number with a foreign country code is kept
    as written (``+15551234567``); only home numbers get the prefix.
    Already-normalized numbers are returned unchanged.
    """
    if phone is None or not str(phone).strip():
        raise ValidationError("Phone number is required")

    normalized = _SEPARATORS_RE.sub("", str(phone))
    if normalized.startswith("+"):
        digits = normalized[1:]
        if digits.startswith(country_code):
            return digits
        # Explicit international number
        return normalized

    if normalized.startswith("0"):
        # Local trunk prefix
        normalized = country_code + normalized[1:]
    elif not normalized.startswith(country_code):
        normalized = country_code + normalized

    return normalized
