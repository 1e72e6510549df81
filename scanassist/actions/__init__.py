# scanassist/actions/__init__.py

"""
Scan action classifier.

Exposes:

    classify(raw: str) -> List[Action]
    resolve_target(action) -> LaunchTarget
"""

from .types import (
    Action,
    ACTION_TYPES,
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
from .detectors import classify, primary_action
from .dispatch import LaunchTarget, resolve_target, serialize_action
