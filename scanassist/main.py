# scanassist/main.py

from __future__ import annotations

import json
import logging
import secrets
import time
from dataclasses import asdict
from functools import lru_cache
from typing import Optional

import sentry_sdk
from fastapi import BackgroundTasks, Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from scanassist import __version__
from scanassist.actions import classify, serialize_action
from scanassist.ai import AiAssistService, AiRateLimited, AiSuccess
from scanassist.config import LOG_LEVEL, MAX_UPLOAD_BYTES, SENTRY_DSN
from scanassist.history import HistoryStore
from scanassist.models import (
    AiResponse,
    ClassifyRequest,
    ClassifyResponse,
    HistoryResponse,
    SettingsOut,
    SettingsUpdateRequest,
)
from scanassist.qr_scanner import process_qr_image
from scanassist.settings_store import SettingsKey, SettingsStore, validate_setting
from scanassist.utils.error_messages import friendly_error

# Init Sentry if configured
if SENTRY_DSN:
    sentry_sdk.init(dsn=SENTRY_DSN, traces_sample_rate=0.2)

logger = logging.getLogger("scanassist")
logging.basicConfig(level=LOG_LEVEL, format="%(message)s")

app = FastAPI(title="ScanAssist API", version=__version__)


# ---------------------------------------------------------
# Collaborators
# ---------------------------------------------------------
@lru_cache(maxsize=1)
def get_history_store() -> HistoryStore:
    return HistoryStore()


@lru_cache(maxsize=1)
def get_settings_store() -> SettingsStore:
    return SettingsStore()


@lru_cache(maxsize=1)
def get_ai_service() -> AiAssistService:
    return AiAssistService()


# Return JSON for unexpected errors/validation failures to avoid empty/HTML responses
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(json.dumps({"event": "error", "path": str(request.url.path), "error": str(exc)}))
    return JSONResponse({"error": "Internal server error."}, status_code=500)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request.", "detail": json.loads(json.dumps(exc.errors(), default=str))},
        status_code=422,
    )


@app.middleware("http")
async def request_log(request: Request, call_next):
    request_id = secrets.token_hex(8)
    request.state.request_id = request_id
    start_time = time.time()
    response = await call_next(request)
    duration = round((time.time() - start_time) * 1000, 2)
    logger.info(
        json.dumps(
            {
                "event": "request",
                "request_id": request_id,
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "duration_ms": duration,
            }
        )
    )
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------
def _save_history(store: HistoryStore, text: str, source_reference: str) -> None:
    """Background task: a failed write is logged, never surfaced to the scan."""
    try:
        store.append(text, source_reference)
    except OSError as exc:
        logger.warning(json.dumps({"event": "history_write_failed", "error": friendly_error(exc)}))


def _settings_out(store: SettingsStore) -> dict:
    snap = store.snapshot()
    snap[SettingsKey.OCR_LANGUAGES.value] = sorted(snap[SettingsKey.OCR_LANGUAGES.value])
    return snap


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/health")
def health():
    return {"status": "ok", "version": __version__}


@app.post("/classify", response_model=ClassifyResponse)
def classify_content(
    body: ClassifyRequest,
    background_tasks: BackgroundTasks,
    history: HistoryStore = Depends(get_history_store),
):
    actions = [serialize_action(a) for a in classify(body.content)]
    logger.info(
        json.dumps(
            {
                "event": "classified",
                "source": body.source,
                "primary": actions[0]["kind"],
                "count": len(actions),
                "content_length": len(body.content),
            }
        )
    )
    if body.save_history and body.content.strip():
        background_tasks.add_task(_save_history, history, body.content, body.source_reference)
    return {"primary": actions[0], "actions": actions}


@app.post("/qr")
async def qr(
    background_tasks: BackgroundTasks,
    image: UploadFile = File(...),
    save_history: bool = False,
    history: HistoryStore = Depends(get_history_store),
):
    img_bytes = await image.read()
    if len(img_bytes) > MAX_UPLOAD_BYTES:
        return JSONResponse({"error": "Image too large. Max 5MB."}, status_code=413)

    try:
        result = process_qr_image(img_bytes)
    except Exception as exc:
        logger.error(json.dumps({"event": "qr_failed", "error": str(exc)}))
        return JSONResponse({"error": "QR scanner unavailable. Try again later."}, status_code=503)

    for item in result["items"]:
        if save_history and item["data"].strip():
            background_tasks.add_task(
                _save_history, history, item["data"], image.filename or "upload"
            )
    return result


@app.post("/ai/process", response_model=AiResponse, response_model_exclude_none=True)
async def ai_process(
    mode: str = Form(...),
    text: Optional[str] = Form(None),
    target_language: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    service: AiAssistService = Depends(get_ai_service),
):
    img_bytes = await image.read() if image is not None else None
    if img_bytes is not None and len(img_bytes) > MAX_UPLOAD_BYTES:
        return JSONResponse(
            {"kind": "error", "message": friendly_error("Image too large.")},
            status_code=413,
        )

    result = service.process(mode, text=text, image=img_bytes, target_language=target_language)
    if isinstance(result, AiSuccess):
        return {"kind": result.kind, "text": result.text}
    if isinstance(result, AiRateLimited):
        wait = result.remaining_seconds
        return JSONResponse(
            {"kind": result.kind, "remaining_seconds": round(wait, 1)},
            status_code=429,
            headers={"Retry-After": str(max(int(wait + 0.999), 1))},
        )
    return JSONResponse({"kind": result.kind, "message": result.message}, status_code=502)


@app.get("/ai/status")
def ai_status(service: AiAssistService = Depends(get_ai_service)):
    limited = service.check_rate_limit()
    if limited is None:
        return {"ready": True, "remaining_seconds": 0}
    return {"ready": False, "remaining_seconds": round(limited.remaining_seconds, 1)}


@app.get("/history", response_model=HistoryResponse)
def list_history(history: HistoryStore = Depends(get_history_store)):
    return {"items": [asdict(r) for r in history.list()], "limit": history.max_items}


@app.delete("/history")
def clear_history(history: HistoryStore = Depends(get_history_store)):
    history.clear()
    return {"success": True}


@app.get("/settings", response_model=SettingsOut)
def read_settings(store: SettingsStore = Depends(get_settings_store)):
    return _settings_out(store)


@app.put("/settings", response_model=SettingsOut)
def update_settings(body: SettingsUpdateRequest, store: SettingsStore = Depends(get_settings_store)):
    updates = body.model_dump(exclude_none=True)
    try:
        for key, value in updates.items():
            validate_setting(SettingsKey(key), value)
    except ValueError as exc:
        return JSONResponse({"error": str(exc)}, status_code=422)
    for key, value in updates.items():
        store.set(SettingsKey(key), value)
    return _settings_out(store)
