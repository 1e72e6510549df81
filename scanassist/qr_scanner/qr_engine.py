# scanassist/qr_scanner/qr_engine.py

import io
import json
import logging
from typing import Any, Dict, List, Optional

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from scanassist.actions import classify, serialize_action

logger = logging.getLogger("scanassist")


# ---------------------------------------------------------
# IMAGE LOADING
# ---------------------------------------------------------
def pil_to_cv2(img: Image.Image) -> np.ndarray:
    """Convert a PIL image to an OpenCV BGR ndarray."""
    if img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGB")

    arr = np.array(img)

    if img.mode == "RGBA":
        arr = cv2.cvtColor(arr, cv2.COLOR_RGBA2BGR)
    elif img.mode == "RGB":
        arr = cv2.cvtColor(arr, cv2.COLOR_RGB2BGR)
    elif img.mode == "L":
        arr = cv2.cvtColor(arr, cv2.COLOR_GRAY2BGR)

    return arr


def decode_image(image_bytes: bytes) -> Optional[np.ndarray]:
    """OpenCV first; Pillow for formats OpenCV can't read (GIF, some WebP)."""
    if not image_bytes:
        return None
    np_arr = np.frombuffer(image_bytes, np.uint8)
    img = cv2.imdecode(np_arr, cv2.IMREAD_COLOR)
    if img is not None:
        return img
    try:
        with Image.open(io.BytesIO(image_bytes)) as pil_img:
            pil_img.load()
            return pil_to_cv2(pil_img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        return None


# ---------------------------------------------------------
# QR DECODING
# ---------------------------------------------------------
def decode_qr_opencv(img: np.ndarray) -> List[Dict[str, Any]]:
    detector = cv2.QRCodeDetector()
    results = []

    # Try Multi QR
    try:
        ret, data, points, _ = detector.detectAndDecodeMulti(img)
    except cv2.error:
        ret, data, points = False, None, None

    if ret and data and points is not None:
        for i, txt in enumerate(data):
            if not txt:
                continue
            pts = points[i].astype(int).tolist()
            results.append({"data": txt, "points": pts})

        if results:
            return results

    # Single fallback
    try:
        txt, pts, _ = detector.detectAndDecode(img)
    except cv2.error:
        return results
    if txt:
        polygon = pts.reshape(-1, 2).astype(int).tolist() if pts is not None else []
        results.append({"data": txt, "points": polygon})

    return results


# ---------------------------------------------------------
# MAIN ENTRY
# ---------------------------------------------------------
def _empty(error: Optional[str] = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {"qr_found": False, "count": 0, "items": []}
    if error:
        result["error"] = error
    return result


def process_qr_image(image_bytes: bytes) -> Dict[str, Any]:
    img = decode_image(image_bytes)
    if img is None:
        return _empty("The image could not be read. Try a JPEG or PNG file.")

    qrs = decode_qr_opencv(img)
    if not qrs:
        return _empty()

    items = []
    for qr in qrs:
        actions = classify(qr["data"])
        items.append(
            {
                "data": qr["data"],
                "points": qr["points"],
                "primary": serialize_action(actions[0]),
                "actions": [serialize_action(a) for a in actions],
            }
        )

    logger.info(
        json.dumps(
            {
                "event": "qr_decoded",
                "count": len(items),
                "kinds": [item["primary"]["kind"] for item in items],
            }
        )
    )

    return {"qr_found": True, "count": len(items), "items": items}
