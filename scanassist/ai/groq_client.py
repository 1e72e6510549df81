# scanassist/ai/groq_client.py

"""
AI assist collaborator backed by Groq.

The cooldown lives here, not in callers: the service holds the single
"last accepted request" timestamp and rejects anything inside the window
with AiRateLimited. Failures come back as AiError with a short message;
nothing raises out of process().
"""

from __future__ import annotations

import base64
import io
import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Optional, Union

from groq import Groq
from PIL import Image, UnidentifiedImageError

from scanassist.config import AI_COOLDOWN_SECONDS, GROQ_TEXT_MODEL, GROQ_VISION_MODEL
from scanassist.utils.error_messages import friendly_error

logger = logging.getLogger("scanassist")

PROMPT_EXTRACT = "Extract all visible text from this image. Return only the extracted text, nothing else."
PROMPT_DESCRIBE = "Describe what is happening in this image in detail."
PROMPT_TRANSLATE = "Translate the following text to {language}. Return only the translated text, nothing else:\n\n{text}"

_client: Groq | None = None


def get_client() -> Groq:
    """Lazily initialize Groq client to avoid import-time failures."""
    global _client
    if _client is None:
        key = os.getenv("GROQ_API_KEY")
        if not key:
            raise RuntimeError("GROQ_API_KEY is not set.")
        _client = Groq(api_key=key)
    return _client


class AiMode(str, Enum):
    EXTRACT_TEXT = "extract_text"
    DESCRIBE_IMAGE = "describe_image"
    TRANSLATE = "translate"


@dataclass(frozen=True)
class AiSuccess:
    text: str
    kind: ClassVar[str] = "success"


@dataclass(frozen=True)
class AiRateLimited:
    remaining_seconds: float
    kind: ClassVar[str] = "rate_limited"


@dataclass(frozen=True)
class AiError:
    message: str
    kind: ClassVar[str] = "error"


AiResult = Union[AiSuccess, AiRateLimited, AiError]


def _image_data_url(image: bytes) -> str:
    """Validate the upload and wrap it as a base64 data URL."""
    with Image.open(io.BytesIO(image)) as im:
        fmt = (im.format or "PNG").lower()
    mime = "image/jpeg" if fmt in ("jpeg", "jpg", "mpo") else f"image/{fmt}"
    return f"data:{mime};base64,{base64.b64encode(image).decode('ascii')}"


class AiAssistService:
    def __init__(
        self,
        client_factory: Callable[[], Groq] = get_client,
        cooldown_seconds: float = AI_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        text_model: str = GROQ_TEXT_MODEL,
        vision_model: str = GROQ_VISION_MODEL,
    ):
        self._client_factory = client_factory
        self._cooldown = cooldown_seconds
        self._clock = clock
        self._text_model = text_model
        self._vision_model = vision_model
        self._lock = threading.Lock()
        self._last_accepted: Optional[float] = None

    # ---------------------------------------------------------
    # RATE LIMIT
    # ---------------------------------------------------------
    def _remaining(self, now: float) -> float:
        if self._last_accepted is None:
            return 0.0
        return max(self._cooldown - (now - self._last_accepted), 0.0)

    def check_rate_limit(self) -> Optional[AiRateLimited]:
        """Report the wait without consuming the slot."""
        with self._lock:
            remaining = self._remaining(self._clock())
        return AiRateLimited(remaining) if remaining > 0 else None

    def _acquire(self) -> Optional[AiRateLimited]:
        with self._lock:
            now = self._clock()
            remaining = self._remaining(now)
            if remaining > 0:
                return AiRateLimited(remaining)
            self._last_accepted = now
        return None

    # ---------------------------------------------------------
    # REQUESTS
    # ---------------------------------------------------------
    def _build_request(
        self,
        mode: AiMode,
        text: Optional[str],
        image: Optional[bytes],
        target_language: Optional[str],
    ) -> Union[dict, AiError]:
        if mode is AiMode.TRANSLATE:
            if not text or not text.strip():
                return AiError("Nothing to translate.")
            if not target_language or not target_language.strip():
                return AiError("Choose a language to translate to.")
            prompt = PROMPT_TRANSLATE.format(language=target_language.strip(), text=text)
            return {
                "model": self._text_model,
                "messages": [{"role": "user", "content": prompt}],
            }

        if not image:
            return AiError("An image is required for this mode.")
        try:
            data_url = _image_data_url(image)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            return AiError(friendly_error(f"cannot identify image: {exc}"))

        prompt = PROMPT_EXTRACT if mode is AiMode.EXTRACT_TEXT else PROMPT_DESCRIBE
        return {
            "model": self._vision_model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": data_url}},
                    ],
                }
            ],
        }

    def process(
        self,
        mode: Union[AiMode, str],
        text: Optional[str] = None,
        image: Optional[bytes] = None,
        target_language: Optional[str] = None,
    ) -> AiResult:
        try:
            mode = AiMode(mode)
        except ValueError:
            return AiError(f"Unknown AI mode: {mode}")

        request = self._build_request(mode, text, image, target_language)
        if isinstance(request, AiError):
            return request

        limited = self._acquire()
        if limited is not None:
            logger.info(json.dumps({
                "event": "ai_rate_limited",
                "mode": mode.value,
                "remaining_seconds": round(limited.remaining_seconds, 1),
            }))
            return limited

        start = time.time()
        try:
            client = self._client_factory()
            resp = client.chat.completions.create(temperature=0.2, **request)
            content = resp.choices[0].message.content
        except Exception as exc:
            logger.warning(json.dumps({"event": "ai_error", "mode": mode.value, "error": str(exc)}))
            return AiError(friendly_error(exc))

        logger.info(json.dumps({
            "event": "ai_success",
            "mode": mode.value,
            "duration_ms": round((time.time() - start) * 1000, 2),
        }))
        return AiSuccess((content or "").strip() or "No response generated")

    def extract_text(self, image: bytes) -> AiResult:
        return self.process(AiMode.EXTRACT_TEXT, image=image)

    def describe_image(self, image: bytes) -> AiResult:
        return self.process(AiMode.DESCRIBE_IMAGE, image=image)

    def translate_text(self, text: str, target_language: str) -> AiResult:
        return self.process(AiMode.TRANSLATE, text=text, target_language=target_language)
