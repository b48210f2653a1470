from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _language_hints() -> List[str]:
    raw = os.getenv("GOOGLE_VISION_LANGUAGE_HINTS", "en")
    return [hint.strip() for hint in raw.split(",") if hint.strip()]


@dataclass(frozen=True)
class Settings:
    """Настройки сервера распознавания чеков"""
    # Google Cloud Vision
    google_vision_api_key: str = os.getenv("GOOGLE_VISION_API_KEY", "")
    google_vision_endpoint: str = os.getenv(
        "GOOGLE_VISION_ENDPOINT", "https://vision.googleapis.com/v1/images:annotate"
    )
    google_vision_timeout: float = float(os.getenv("GOOGLE_VISION_TIMEOUT", "120"))
    language_hints: List[str] = field(default_factory=_language_hints)

    # Пороги нарезки (px)
    single_shot_max_height: int = int(os.getenv("OCR_SINGLE_SHOT_MAX_HEIGHT", "3000"))
    chunk_height: int = int(os.getenv("OCR_CHUNK_HEIGHT", "3000"))
    chunk_overlap: int = int(os.getenv("OCR_CHUNK_OVERLAP", "300"))

    # Параллельные запросы OCR внутри одной задачи (1 = последовательно)
    max_workers: int = int(os.getenv("OCR_MAX_WORKERS", "1"))


settings = Settings()
