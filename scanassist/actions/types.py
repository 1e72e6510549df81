# scanassist/actions/types.py

"""
Action model for classified scan content.

Every variant is a frozen dataclass: equality and hashing come from the
payload only, so two classifications of the same text produce equal
actions. `kind` is the discriminant used by the API and by dispatch code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union


PHONE_CHARS_REGEX = re.compile(r"\+?[0-9 ()\-]+")
_EMAIL_ATOM = r"[^\s@:;,<>()\[\]\"\\"
EMAIL_REGEX = re.compile(
    _EMAIL_ATOM + r"]+@" + _EMAIL_ATOM + r".]+(?:\." + _EMAIL_ATOM + r".]+)+"
)
MIN_PHONE_DIGITS = 3


class WifiSecurity(str, Enum):
    WPA = "WPA"
    WEP = "WEP"
    OPEN = "OPEN"


def is_phone_number(value: str) -> bool:
    """Digits, one leading '+', spaces, hyphens, parentheses; at least 3 digits."""
    if not value or not PHONE_CHARS_REGEX.fullmatch(value):
        return False
    return sum(ch.isdigit() for ch in value) >= MIN_PHONE_DIGITS


def is_email_address(value: str) -> bool:
    return bool(value) and EMAIL_REGEX.fullmatch(value) is not None


# ---------------------------------------------------------
# VARIANTS
# ---------------------------------------------------------

@dataclass(frozen=True)
class OpenUrl:
    url: str

    kind: ClassVar[str] = "open_url"
    icon: ClassVar[str] = "link"

    def __post_init__(self) -> None:
        if not self.url.lower().startswith(("http://", "https://")):
            raise ValueError(f"URL must carry an http(s) scheme: {self.url!r}")

    @property
    def label(self) -> str:
        return "Open Link"


@dataclass(frozen=True)
class CallPhone:
    number: str

    kind: ClassVar[str] = "call_phone"
    icon: ClassVar[str] = "call"

    def __post_init__(self) -> None:
        if not is_phone_number(self.number):
            raise ValueError(f"Not a phone number: {self.number!r}")

    @property
    def label(self) -> str:
        return "Call"


@dataclass(frozen=True)
class SendEmail:
    email: str
    subject: Optional[str] = None
    body: Optional[str] = None

    kind: ClassVar[str] = "send_email"
    icon: ClassVar[str] = "email"

    def __post_init__(self) -> None:
        if not is_email_address(self.email):
            raise ValueError(f"Not an email address: {self.email!r}")

    @property
    def label(self) -> str:
        return "Send Email"


@dataclass(frozen=True)
class ConnectWifi:
    ssid: str
    password: Optional[str]
    security: WifiSecurity

    kind: ClassVar[str] = "connect_wifi"
    icon: ClassVar[str] = "wifi"

    def __post_init__(self) -> None:
        if not self.ssid:
            raise ValueError("WiFi SSID must not be empty.")
        if self.security is not WifiSecurity.OPEN and not self.password:
            raise ValueError(f"{self.security.value} network requires a password.")

    @property
    def label(self) -> str:
        return "Connect to WiFi"


@dataclass(frozen=True)
class SendSms:
    number: str
    message: Optional[str] = None

    kind: ClassVar[str] = "send_sms"
    icon: ClassVar[str] = "sms"

    def __post_init__(self) -> None:
        if not is_phone_number(self.number):
            raise ValueError(f"Not a phone number: {self.number!r}")

    @property
    def label(self) -> str:
        return "Send SMS"


@dataclass(frozen=True)
class AddContact:
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    organization: Optional[str] = None

    kind: ClassVar[str] = "add_contact"
    icon: ClassVar[str] = "person"

    def __post_init__(self) -> None:
        if not (self.name or self.phone or self.email):
            raise ValueError("Contact needs a name, phone or email.")

    @property
    def label(self) -> str:
        return "Add Contact"


@dataclass(frozen=True)
class CopyText:
    text: str
    display_label: str = "Copy"

    kind: ClassVar[str] = "copy_text"
    icon: ClassVar[str] = "copy"

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("Nothing to copy.")

    @property
    def label(self) -> str:
        return self.display_label


@dataclass(frozen=True)
class ShowRaw:
    """Fallback: the untouched input, constructible from any string."""

    text: str

    kind: ClassVar[str] = "show_raw"
    icon: ClassVar[str] = "text"

    @property
    def label(self) -> str:
        return "View Text"


Action = Union[
    OpenUrl,
    CallPhone,
    SendEmail,
    ConnectWifi,
    SendSms,
    AddContact,
    CopyText,
    ShowRaw,
]

ACTION_TYPES = (OpenUrl, CallPhone, SendEmail, ConnectWifi, SendSms, AddContact, CopyText, ShowRaw)


def action_to_dict(action: Action) -> Dict[str, Any]:
    """Flatten an action into the JSON shape served by the API."""
    payload: Dict[str, Any] = {}
    for f in fields(action):
        value = getattr(action, f.name)
        payload[f.name] = value.value if isinstance(value, Enum) else value
    return {
        "kind": action.kind,
        "label": action.label,
        "icon": action.icon,
        "payload": payload,
    }
