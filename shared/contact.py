"""
Helpers for deriving where a customer can be reached.

Profiles created through one-time-code sign-in used to have no phone
column; the phone number was encoded in a synthetic email of the form
``<digits>@temp.<domain>``. New profiles carry an explicit ``phone``;
the synthetic pattern is only read as a fallback for legacy rows.
"""
import re
from typing import Optional

from shared.config.settings import DEFAULT_COUNTRY_CODE

SYNTHETIC_EMAIL_RE = re.compile(r"^(\d+)@temp\.[^@\s]+$", re.IGNORECASE)


def normalize_phone(raw: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Returns an E.164-style number; 10-digit local numbers get the default country code."""
    digits = re.sub(r"\D", "", raw or "")
    if not digits:
        raise ValueError("Phone number must contain digits")
    if raw.strip().startswith("+"):
        return f"+{digits}"
    if len(digits) == 10:
        return f"+{country_code}{digits}"
    return f"+{digits}"


def phone_from_synthetic_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    match = SYNTHETIC_EMAIL_RE.match(email.strip())
    return match.group(1) if match else None


def is_synthetic_email(email: Optional[str]) -> bool:
    return phone_from_synthetic_email(email) is not None


def contact_phone(profile) -> Optional[str]:
    """Explicit phone first, then the legacy synthetic-email convention."""
    raw = profile.phone or phone_from_synthetic_email(profile.email)
    if not raw:
        return None
    return normalize_phone(raw)


def contact_email(profile) -> Optional[str]:
    if profile.email and not is_synthetic_email(profile.email):
        return profile.email
    return None
