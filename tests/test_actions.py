"""Tests for the action model and launch dispatch."""

import pytest

from scanassist.actions import (
    ACTION_TYPES,
    AddContact,
    CallPhone,
    ConnectWifi,
    CopyText,
    LaunchTarget,
    OpenUrl,
    SendEmail,
    SendSms,
    ShowRaw,
    WifiSecurity,
    action_to_dict,
    classify,
    resolve_target,
    serialize_action,
)
from scanassist.actions.dispatch import wifi_payload


class TestInvariants:
    def test_url_needs_scheme(self):
        with pytest.raises(ValueError):
            OpenUrl("www.example.com")

    def test_phone_needs_three_digits(self):
        with pytest.raises(ValueError):
            CallPhone("12")
        with pytest.raises(ValueError):
            SendSms("call-me")

    def test_email_shape(self):
        with pytest.raises(ValueError):
            SendEmail("not-an-email")

    def test_wifi_password_required_unless_open(self):
        with pytest.raises(ValueError):
            ConnectWifi("Net", None, WifiSecurity.WPA)
        with pytest.raises(ValueError):
            ConnectWifi("", "pw", WifiSecurity.WPA)
        assert ConnectWifi("Net", None, WifiSecurity.OPEN).password is None

    def test_contact_needs_identity(self):
        with pytest.raises(ValueError):
            AddContact(organization="Acme")

    def test_copy_text_not_empty(self):
        with pytest.raises(ValueError):
            CopyText("")

    def test_show_raw_accepts_anything(self):
        assert ShowRaw("").text == ""


class TestValueSemantics:
    def test_equality_by_payload(self):
        assert OpenUrl("https://a.io") == OpenUrl("https://a.io")
        assert hash(SendSms("5550100", "hi")) == hash(SendSms("5550100", "hi"))

    def test_immutable(self):
        action = CallPhone("5550100")
        with pytest.raises(AttributeError):
            action.number = "5550199"

    def test_labels(self):
        assert OpenUrl("https://a.io").label == "Open Link"
        assert CallPhone("5550100").label == "Call"
        assert SendEmail("a@b.com").label == "Send Email"
        assert ConnectWifi("N", None, WifiSecurity.OPEN).label == "Connect to WiFi"
        assert SendSms("5550100").label == "Send SMS"
        assert AddContact(name="A").label == "Add Contact"
        assert CopyText("x").label == "Copy"
        assert CopyText("x", "Copy SSID").label == "Copy SSID"
        assert ShowRaw("x").label == "View Text"

    def test_kinds_are_unique(self):
        kinds = [t.kind for t in ACTION_TYPES]
        assert len(kinds) == len(set(kinds))

    def test_to_dict(self):
        data = action_to_dict(ConnectWifi("Net", "pw", WifiSecurity.WEP))
        assert data == {
            "kind": "connect_wifi",
            "label": "Connect to WiFi",
            "icon": "wifi",
            "payload": {"ssid": "Net", "password": "pw", "security": "WEP"},
        }


class TestDispatch:
    def test_every_classified_action_resolves(self):
        raws = [
            "WIFI:T:WPA;S:MyNet;P:secret123;;",
            "MECARD:N:Doe,John;TEL:5550100;;",
            "mailto:a@b.com?subject=Hi",
            "tel:5550100",
            "sms:5550100?body=hi",
            "www.example.com",
            "plain text",
        ]
        for raw in raws:
            for action in classify(raw):
                assert isinstance(resolve_target(action), LaunchTarget)

    def test_targets(self):
        assert resolve_target(OpenUrl("https://a.io")) == LaunchTarget("open_uri", "https://a.io")
        assert resolve_target(CallPhone("+1 555")).uri == "tel:+1%20555"
        email = resolve_target(SendEmail("a@b.com", subject="Hi"))
        assert email.operation == "compose_email"
        assert email.extras == {"subject": "Hi"}
        sms = resolve_target(SendSms("5550100", "yo"))
        assert sms.uri == "smsto:5550100"
        assert sms.extras == {"sms_body": "yo"}
        contact = resolve_target(AddContact(name="Ann", organization="Acme"))
        assert contact.extras == {"name": "Ann", "company": "Acme"}
        assert resolve_target(ShowRaw("abc")).extras == {"text": "abc"}

    def test_wifi_payload_round_trips(self):
        action = ConnectWifi("My;Net", "p:w", WifiSecurity.WPA)
        assert classify(wifi_payload(action))[0] == action

    def test_open_wifi_payload(self):
        assert wifi_payload(ConnectWifi("Guest", None, WifiSecurity.OPEN)) == "WIFI:T:nopass;S:Guest;;"

    def test_unknown_type_rejected(self):
        with pytest.raises(TypeError):
            resolve_target("not an action")

    def test_serialize_includes_target(self):
        data = serialize_action(OpenUrl("https://a.io"))
        assert data["target"] == {"operation": "open_uri", "uri": "https://a.io", "extras": {}}
