import re
from typing import Any

PII_FIELDS = {
    "email",
    "phone",
    "address",
    "name",
    "ssn",
    "card_number",
}

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_CARD_RE = re.compile(r"\b(?:\d[ -]?){13,16}\b")
_SSN_RE = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
_PHONE_RE = re.compile(r"(?<!\w)(?:\+?\d{1,3}[\s.-]?)?(?:\(\d{3}\)|\d{3})[\s.-]?\d{3}[\s.-]?\d{4}\b")
_ADDRESS_RE = re.compile(
    r"\b\d{1,5}\s+(?:[A-Z][a-z]+\s+){1,3}(?:Street|St|Avenue|Ave|Road|Rd|Lane|Ln|Drive|Dr|Boulevard|Blvd|Court|Ct)\b\.?"
)

# Order matters: cards before phones, SSNs before phones.
_PATTERNS = (
    (_EMAIL_RE, "[EMAIL]"),
    (_CARD_RE, "[CARD]"),
    (_SSN_RE, "[SSN]"),
    (_PHONE_RE, "[PHONE]"),
    (_ADDRESS_RE, "[ADDRESS]"),
)


def redact_text(text: str) -> str:
    if not text:
        return text
    for pattern, token in _PATTERNS:
        text = pattern.sub(token, text)
    return text


def redact_pii(value: Any, redact_keys: set[str] = PII_FIELDS) -> Any:
    """Recursively redact PII-named keys and PII-looking strings."""
    if value is None:
        return None
    if isinstance(value, dict):
        redacted = {}
        for key, item in value.items():
            if isinstance(key, str) and key.lower() in redact_keys:
                redacted[key] = "[REDACTED]"
            else:
                redacted[key] = redact_pii(item, redact_keys)
        return redacted
    if isinstance(value, (list, tuple)):
        return [redact_pii(item, redact_keys) for item in value]
    if isinstance(value, str):
        return redact_text(value)
    return value
