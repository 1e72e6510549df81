from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from scanassist.config import HISTORY_LIMIT


class ClassifyRequest(BaseModel):
    content: str = Field(..., max_length=5_000_000, description="Raw OCR or barcode text.")
    source: Literal["ocr", "barcode", "unknown"] = Field(
        "unknown",
        description="Which engine produced the text.",
    )
    source_reference: str = Field("", description="Image URI or other pointer kept with history.")
    save_history: bool = False


class ActionOut(BaseModel):
    kind: str
    label: str
    icon: str
    payload: Dict[str, Any]
    target: Dict[str, Any] = Field(default_factory=dict)


class ClassifyResponse(BaseModel):
    primary: ActionOut
    actions: List[ActionOut]


class HistoryItemOut(BaseModel):
    id: str
    text: str
    source_reference: str
    timestamp: int


class HistoryResponse(BaseModel):
    items: List[HistoryItemOut]
    limit: int = HISTORY_LIMIT


class SettingsOut(BaseModel):
    theme_mode: Literal["system", "light", "dark"]
    high_contrast: bool
    ocr_languages: List[str]


class SettingsUpdateRequest(BaseModel):
    theme_mode: Optional[Literal["system", "light", "dark"]] = None
    high_contrast: Optional[bool] = None
    ocr_languages: Optional[List[str]] = None


class AiResponse(BaseModel):
    kind: Literal["success", "rate_limited", "error"]
    text: Optional[str] = None
    remaining_seconds: Optional[float] = None
    message: Optional[str] = None
