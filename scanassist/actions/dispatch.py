# scanassist/actions/dispatch.py

"""
Turns an Action into a platform-neutral launch target.

Clients map `operation` onto their own intent/URL handler. The match below
is total over the closed set of action types; anything else is a TypeError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

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
    action_to_dict,
)


@dataclass(frozen=True)
class LaunchTarget:
    operation: str
    uri: Optional[str] = None
    extras: Dict[str, str] = field(default_factory=dict)


def _wifi_escape(value: str) -> str:
    for ch in ("\\", ";", ",", ":", '"'):
        value = value.replace(ch, "\\" + ch)
    return value


def wifi_payload(action: ConnectWifi) -> str:
    """Re-encode a ConnectWifi as a canonical WIFI: string."""
    wifi_type = "nopass" if action.security is WifiSecurity.OPEN else action.security.value
    payload = f"WIFI:T:{wifi_type};S:{_wifi_escape(action.ssid)};"
    if action.password:
        payload += f"P:{_wifi_escape(action.password)};"
    return payload + ";"


def _extras(**values: Optional[str]) -> Dict[str, str]:
    return {k: v for k, v in values.items() if v}


def resolve_target(action: Action) -> LaunchTarget:
    if isinstance(action, OpenUrl):
        return LaunchTarget("open_uri", action.url)
    if isinstance(action, CallPhone):
        return LaunchTarget("dial", f"tel:{quote(action.number, safe='+()-')}")
    if isinstance(action, SendEmail):
        return LaunchTarget(
            "compose_email",
            f"mailto:{action.email}",
            _extras(subject=action.subject, body=action.body),
        )
    if isinstance(action, SendSms):
        return LaunchTarget(
            "compose_sms",
            f"smsto:{quote(action.number, safe='+()-')}",
            _extras(sms_body=action.message),
        )
    if isinstance(action, ConnectWifi):
        return LaunchTarget(
            "join_wifi",
            wifi_payload(action),
            _extras(ssid=action.ssid, password=action.password, security=action.security.value),
        )
    if isinstance(action, AddContact):
        return LaunchTarget(
            "insert_contact",
            extras=_extras(
                name=action.name,
                phone=action.phone,
                email=action.email,
                company=action.organization,
            ),
        )
    if isinstance(action, (CopyText, ShowRaw)):
        return LaunchTarget("copy_to_clipboard", extras={"text": action.text})
    raise TypeError(f"Unsupported action type: {type(action).__name__}")


def serialize_action(action: Action) -> Dict[str, Any]:
    """API shape of an action, including where it launches."""
    out = action_to_dict(action)
    target = resolve_target(action)
    out["target"] = {"operation": target.operation, "uri": target.uri, "extras": dict(target.extras)}
    return out
