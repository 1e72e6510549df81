"""Tests for QR image processing."""

import io

import numpy as np
from PIL import Image

from scanassist.qr_scanner import decode_image, process_qr_image
from scanassist.qr_scanner import qr_engine


def image_bytes(fmt="PNG"):
    buf = io.BytesIO()
    Image.new("RGB", (64, 64), "white").save(buf, format=fmt)
    return buf.getvalue()


class TestDecodeImage:
    def test_png(self):
        img = decode_image(image_bytes())
        assert img.shape == (64, 64, 3)

    def test_gif_via_pillow(self):
        img = decode_image(image_bytes("GIF"))
        assert img is not None
        assert img.shape[2] == 3

    def test_garbage(self):
        assert decode_image(b"not an image") is None
        assert decode_image(b"") is None


class TestProcessQrImage:
    def test_unreadable_image(self):
        result = process_qr_image(b"not an image")
        assert result["qr_found"] is False
        assert result["count"] == 0
        assert "error" in result

    def test_oversized_image_is_unreadable(self, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        result = process_qr_image(image_bytes("GIF"))
        assert result["qr_found"] is False
        assert result["count"] == 0
        assert "error" in result

    def test_blank_image_has_no_codes(self):
        result = process_qr_image(image_bytes())
        assert result == {"qr_found": False, "count": 0, "items": []}

    def test_decoded_payloads_are_classified(self, monkeypatch):
        decoded = [
            {"data": "WIFI:T:WPA;S:MyNet;P:secret123;;", "points": [[0, 0], [1, 0], [1, 1], [0, 1]]},
            {"data": "just text", "points": []},
        ]
        monkeypatch.setattr(qr_engine, "decode_qr_opencv", lambda img: decoded)
        result = process_qr_image(image_bytes())

        assert result["qr_found"] is True
        assert result["count"] == 2
        wifi, text = result["items"]
        assert wifi["primary"]["kind"] == "connect_wifi"
        assert wifi["primary"]["payload"] == {"ssid": "MyNet", "password": "secret123", "security": "WPA"}
        assert wifi["primary"]["target"]["operation"] == "join_wifi"
        assert wifi["actions"][-1]["kind"] == "show_raw"
        assert text["primary"] == text["actions"][-1]
        assert text["primary"]["payload"] == {"text": "just text"}

    def test_payload_is_not_stripped(self, monkeypatch):
        monkeypatch.setattr(qr_engine, "decode_qr_opencv", lambda img: [{"data": " 555-0100 ", "points": []}])
        item = process_qr_image(image_bytes())["items"][0]
        assert item["primary"]["payload"] == {"number": "555-0100"}
        assert item["actions"][-1]["payload"] == {"text": " 555-0100 "}


def test_decode_qr_opencv_on_blank_image():
    img = np.full((100, 100, 3), 255, dtype=np.uint8)
    assert qr_engine.decode_qr_opencv(img) == []
