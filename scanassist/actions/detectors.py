# scanassist/actions/detectors.py

"""
Scan content classifier.

    classify(raw: str) -> List[Action]

Runs an ordered battery of detectors against the whole (stripped) string.
Each detector either extracts one Action or returns None; a detector never
raises on malformed payloads. Results keep detector order, are
deduplicated by value, and always end with ShowRaw(raw).
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlsplit

from .types import (
    Action,
    AddContact,
    CallPhone,
    ConnectWifi,
    CopyText,
    OpenUrl,
    SendEmail,
    SendSms,
    ShowRaw,
    WifiSecurity,
    is_email_address,
    is_phone_number,
)

Detector = Callable[[str], Optional[Action]]

# Larger than any QR payload; anything longer is prose from OCR.
MAX_STRUCTURED_LENGTH = 8192

WPA_TYPES = {"WPA", "WPA2", "WPA3", "WPA2-EAP", "WPA-EAP", "SAE"}
VCARD_ESCAPES = {"n": "\n", "N": "\n", ",": ",", ";": ";", "\\": "\\"}


# ---------------------------------------------------------
# FIELD HELPERS
# ---------------------------------------------------------

def _strip_prefix(text: str, *prefixes: str) -> Optional[str]:
    """Return text after the first matching prefix (case-insensitive)."""
    lowered = text.lower()
    for prefix in prefixes:
        if lowered.startswith(prefix.lower()):
            return text[len(prefix):]
    return None


def _split_unescaped(text: str, sep: str) -> List[str]:
    """Split on `sep` not preceded by a backslash; escapes stay in place."""
    parts: List[str] = []
    current: List[str] = []
    escaped = False
    for ch in text:
        if escaped:
            current.append("\\" + ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == sep:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if escaped:
        current.append("\\")
    parts.append("".join(current))
    return parts


def _unescape(value: str) -> str:
    r"""Resolve MECARD/WIFI escapes: \; \, \: \\ (and any other \x -> x)."""
    return re.sub(r"\\(.)", r"\1", value)


def _parse_fields(body: str) -> Optional[Dict[str, str]]:
    """
    Parse `K:value;K2:value;;` into {KEY: value}. First occurrence of a key
    wins. Returns None when a non-empty field has no key.
    """
    parsed: Dict[str, str] = {}
    for field in _split_unescaped(body, ";"):
        if not field:
            continue
        key, sep, value = field.partition(":")
        if not sep or not key or not key.isalnum():
            return None
        parsed.setdefault(key.upper(), _unescape(value))
    return parsed


def _parse_query(query: str) -> Dict[str, str]:
    """Percent-decode `a=b&c=d`; '+' stays literal as in mailto/sms URIs."""
    params: Dict[str, str] = {}
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params.setdefault(unquote(key).lower(), unquote(value))
    return params


def _or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ---------------------------------------------------------
# 1. WIFI
# ---------------------------------------------------------

def detect_wifi(text: str) -> Optional[Action]:
    body = _strip_prefix(text, "WIFI:")
    if body is None:
        return None
    parsed = _parse_fields(body)
    if parsed is None:
        return None

    ssid = parsed.get("S", "")
    if not ssid:
        return None
    password = parsed.get("P") or None
    raw_type = parsed.get("T", "").strip().upper()

    if raw_type in WPA_TYPES:
        security = WifiSecurity.WPA
    elif raw_type == "WEP":
        security = WifiSecurity.WEP
    elif raw_type in ("", "NOPASS"):
        security = WifiSecurity.OPEN
    else:
        security = WifiSecurity.WPA if password else WifiSecurity.OPEN

    if security is WifiSecurity.OPEN:
        password = None
    elif not password:
        return None
    return ConnectWifi(ssid=ssid, password=password, security=security)


# ---------------------------------------------------------
# 2. CONTACT (MECARD / vCard)
# ---------------------------------------------------------

def _contact_or_none(
    name: Optional[str],
    phone: Optional[str],
    email: Optional[str],
    organization: Optional[str],
) -> Optional[Action]:
    name, phone, email = _or_none(name), _or_none(phone), _or_none(email)
    if not (name or phone or email):
        return None
    return AddContact(name=name, phone=phone, email=email, organization=_or_none(organization))


def _mecard(text: str) -> Optional[Action]:
    body = _strip_prefix(text, "MECARD:")
    if body is None:
        return None
    name = phone = email = org = None
    for field in _split_unescaped(body, ";"):
        key, sep, value = field.partition(":")
        if not sep:
            continue
        key = key.strip().upper()
        if key == "N" and name is None:
            parts = [_unescape(p).strip() for p in _split_unescaped(value, ",")]
            name = " ".join(p for p in reversed(parts) if p)
        elif key == "TEL" and phone is None:
            phone = _unescape(value)
        elif key == "EMAIL" and email is None:
            email = _unescape(value)
        elif key == "ORG" and org is None:
            org = _unescape(value)
    return _contact_or_none(name, phone, email, org)


def _vcard_value(value: str) -> str:
    return re.sub(r"\\(.)", lambda m: VCARD_ESCAPES.get(m.group(1), m.group(1)), value)


def _vcard_components(value: str) -> List[str]:
    return [_vcard_value(p).strip() for p in _split_unescaped(value, ";")]


def _vcard(text: str) -> Optional[Action]:
    lowered = text.lower()
    if not lowered.startswith("begin:vcard") or "end:vcard" not in lowered:
        return None

    # RFC 6350 line unfolding
    unfolded = re.sub(r"\r?\n[ \t]", "", text)
    props: Dict[str, str] = {}
    for line in re.split(r"\r\n|\r|\n", unfolded):
        head, sep, value = line.partition(":")
        if not sep:
            continue
        # drop group prefix ("item1.TEL") and parameters ("TEL;TYPE=CELL")
        prop = head.split(";", 1)[0].rsplit(".", 1)[-1].strip().upper()
        if prop and value.strip() and prop not in props:
            props[prop] = value

    name = None
    if props.get("FN"):
        name = _vcard_value(props["FN"])
    elif props.get("N"):
        # N:Family;Given;Middle;Prefix;Suffix
        parts = _vcard_components(props["N"]) + [""] * 5
        family, given, middle, prefix, suffix = parts[:5]
        name = " ".join(p for p in (prefix, given, middle, family, suffix) if p)

    org = None
    if props.get("ORG"):
        org = " ".join(p for p in _vcard_components(props["ORG"]) if p)

    phone = _vcard_value(props["TEL"]) if "TEL" in props else None
    email = _vcard_value(props["EMAIL"]) if "EMAIL" in props else None
    return _contact_or_none(name, phone, email, org)


def detect_contact(text: str) -> Optional[Action]:
    return _mecard(text) or _vcard(text)


# ---------------------------------------------------------
# 3. EMAIL
# ---------------------------------------------------------

def detect_email(text: str) -> Optional[Action]:
    rest = _strip_prefix(text, "mailto:")
    if rest is not None:
        address_part, _, query = rest.partition("?")
        address = unquote(address_part.split(",", 1)[0]).strip()
        if not is_email_address(address):
            return None
        params = _parse_query(query)
        return SendEmail(
            email=address,
            subject=params.get("subject") or None,
            body=params.get("body") or None,
        )

    body = _strip_prefix(text, "MATMSG:")
    if body is not None:
        parsed = _parse_fields(body)
        if parsed is None:
            return None
        address = parsed.get("TO", "").strip()
        if not is_email_address(address):
            return None
        return SendEmail(
            email=address,
            subject=parsed.get("SUB") or None,
            body=parsed.get("BODY") or None,
        )

    if is_email_address(text):
        return SendEmail(email=text)
    return None


# ---------------------------------------------------------
# 4. PHONE
# ---------------------------------------------------------

def detect_phone(text: str) -> Optional[Action]:
    rest = _strip_prefix(text, "tel:")
    number = unquote(rest).strip() if rest is not None else text
    if is_phone_number(number):
        return CallPhone(number=number)
    return None


# ---------------------------------------------------------
# 5. SMS
# ---------------------------------------------------------

def detect_sms(text: str) -> Optional[Action]:
    rest = _strip_prefix(text, "smsto:")
    if rest is not None:
        number, _, message = rest.partition(":")
        number = number.strip()
        if not is_phone_number(number):
            return None
        return SendSms(number=number, message=message or None)

    rest = _strip_prefix(text, "sms:")
    if rest is None:
        return None
    recipients, _, query = rest.partition("?")
    number = unquote(recipients.split(",", 1)[0]).strip()
    if not is_phone_number(number):
        return None
    return SendSms(number=number, message=_parse_query(query).get("body") or None)


# ---------------------------------------------------------
# 6. URL
# ---------------------------------------------------------

def _has_whitespace(text: str) -> bool:
    return any(ch.isspace() for ch in text)


def detect_url(text: str) -> Optional[Action]:
    if _has_whitespace(text):
        return None

    lowered = text.lower()
    if lowered.startswith(("http://", "https://")):
        try:
            host = urlsplit(text).hostname
        except ValueError:
            return None
        return OpenUrl(url=text) if host else None

    if lowered.startswith("www."):
        host = re.split(r"[/?#:]", text, maxsplit=1)[0]
        labels = host.split(".")
        if "@" in host or len(labels) < 2 or not all(labels):
            return None
        return OpenUrl(url="https://" + text)
    return None


# ---------------------------------------------------------
# ENGINE
# ---------------------------------------------------------

# Priority order: most structured first.
DETECTORS: Tuple[Detector, ...] = (
    detect_wifi,
    detect_contact,
    detect_email,
    detect_phone,
    detect_sms,
    detect_url,
)


def _copy_companion(action: Action) -> Optional[CopyText]:
    if isinstance(action, ConnectWifi):
        return CopyText(action.ssid, "Copy SSID")
    if isinstance(action, OpenUrl):
        return CopyText(action.url, "Copy Link")
    if isinstance(action, SendEmail):
        return CopyText(action.email, "Copy Email")
    if isinstance(action, (CallPhone, SendSms)):
        return CopyText(action.number, "Copy Number")
    return None


def classify(raw: str, include_copy: bool = True) -> List[Action]:
    """
    Classify scanned text into actions, most specific first.

    Total over all strings: the result is never empty and its last element
    is always ShowRaw(raw) with the input untouched.
    """
    text = raw.strip()
    primary: List[Action] = []

    if text and len(text) <= MAX_STRUCTURED_LENGTH:
        for detector in DETECTORS:
            action = detector(text)
            if action is not None and action not in primary:
                primary.append(action)

    actions: List[Action] = list(primary)
    if include_copy:
        for action in primary:
            companion = _copy_companion(action)
            if companion is not None and companion not in actions:
                actions.append(companion)

    actions.append(ShowRaw(raw))
    return actions


def primary_action(raw: str) -> Action:
    """The action a UI should suggest first."""
    return classify(raw, include_copy=False)[0]
