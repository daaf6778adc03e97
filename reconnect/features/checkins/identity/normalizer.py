"""
Phone and email helpers used ahead of directory resolution.

Everything here is pure: no I/O, no logging, no failure mode beyond the
``is_too_short`` marker on NormalizedPhone.
"""

import re

from reconnect.features.checkins.domain import NormalizedPhone

_NON_DIGIT_RE = re.compile(r"\D")
_EMAIL_SEPARATOR_RE = re.compile(r"[._+]")
_WORD_START_RE = re.compile(r"\b\w")
_DIGITS_RE = re.compile(r"\d+")


def is_email(identifier: str | None) -> bool:
    return bool(identifier) and "@" in identifier


def normalize_phone(raw: str | None) -> NormalizedPhone:
    """Reduce a raw phone string to digits and a NANP-style last-10 view."""
    if not raw:
        return NormalizedPhone(
            original=raw, normalized="", digits="", last10="", area="", exchange="", number=""
        )

    digits = _NON_DIGIT_RE.sub("", raw)

    if len(digits) == 11 and digits.startswith("1"):
        normalized = digits
        last10 = digits[1:]
    elif len(digits) == 10:
        normalized = "1" + digits
        last10 = digits
    elif len(digits) > 10:
        # International or malformed: keep the trailing ten digits
        last10 = digits[-10:]
        normalized = "1" + last10
    else:
        normalized = digits
        last10 = digits

    return NormalizedPhone(
        original=raw,
        normalized=normalized,
        digits=digits,
        last10=last10,
        area=last10[:3],
        exchange=last10[3:6],
        number=last10[6:10],
    )


def display_name_from_email(email: str) -> str:
    """Turn ``john.smith+news42@x.com`` into ``John Smith News``; raw email if nothing is left."""
    local_part = email.split("@", 1)[0]
    spaced = _EMAIL_SEPARATOR_RE.sub(" ", local_part)
    capitalized = _WORD_START_RE.sub(lambda match: match.group(0).upper(), spaced)
    cleaned = " ".join(_DIGITS_RE.sub("", capitalized).split())
    return cleaned or email


def format_fallback_name(identifier: str) -> str:
    """Deterministic display name used whenever the directory gives no answer."""
    if is_email(identifier):
        return display_name_from_email(identifier)

    digits = _NON_DIGIT_RE.sub("", identifier)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return identifier


def candidate_search_strings(phone: NormalizedPhone) -> list[str]:
    """Spellings of one number as they commonly appear in address books."""
    if phone.is_too_short:
        return [phone.digits] if phone.digits else []

    return [
        f"({phone.area}) {phone.exchange}-{phone.number}",
        f"{phone.area}-{phone.exchange}-{phone.number}",
        f"+1{phone.last10}",
        phone.last10,
    ]
